from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from todo_notes.main import app
from todo_notes.repositories import TodoList, get_todo_list
from todo_notes.schemas import NoteOut

client = TestClient(app)


@pytest.fixture(autouse=True)
def fresh_list():
    notes = TodoList()
    app.dependency_overrides[get_todo_list] = lambda: notes
    yield notes
    app.dependency_overrides.clear()


def create_note(title="Test Note", content="Do something", variant=None):
    payload = {"title": title, "content": content}
    if variant is not None:
        payload["variant"] = variant
    res = client.post("/api/v1/notes/", json=payload)
    assert res.status_code == 201
    return res.json()


def assert_note_shape(note: dict):
    for key in ["id", "title", "content", "is_completed", "variant", "created_at", "updated_at"]:
        assert key in note
    assert isinstance(note["id"], int)
    assert isinstance(note["is_completed"], bool)
    # Timestamps carry a UTC offset
    assert datetime.fromisoformat(note["created_at"].replace("Z", "+00:00")).tzinfo is not None
    datetime.fromisoformat(note["updated_at"].replace("Z", "+00:00"))


class TestHealth:
    def test_health_check(self):
        create_note()
        res = client.get("/")
        assert res.status_code == 200
        assert res.json() == {"message": "Healthy", "notes": 1}


class TestNotesCRUD:
    def test_create_and_get(self):
        note = create_note(title="Buy milk", content="2 litres")
        assert_note_shape(note)
        assert note["is_completed"] is False
        assert note["variant"] == "default"

        res = client.get(f"/api/v1/notes/{note['id']}")
        assert res.status_code == 200
        assert res.json()["title"] == "Buy milk"

    def test_get_not_found(self):
        res = client.get("/api/v1/notes/999999")
        assert res.status_code == 404
        assert res.json()["detail"] == "Note not found"

    def test_patch_partial_update(self):
        note = create_note(title="Partial", content="X")
        res = client.patch(f"/api/v1/notes/{note['id']}", json={"title": "Partial Updated"})
        assert res.status_code == 200
        patched = res.json()
        assert patched["title"] == "Partial Updated"
        assert patched["content"] == "X"
        assert patched["is_completed"] is False

    def test_patch_not_found(self):
        res = client.patch("/api/v1/notes/123456", json={"title": "Nope"})
        assert res.status_code == 404
        assert res.json()["detail"] == "Note not found"

    def test_patch_rejects_completion_field(self):
        note = create_note()
        res = client.patch(f"/api/v1/notes/{note['id']}", json={"is_completed": True})
        assert res.status_code == 422

    def test_delete(self, fresh_list):
        note = create_note(title="ToDelete")
        res_del = client.delete(f"/api/v1/notes/{note['id']}")
        assert res_del.status_code == 204
        assert res_del.text == ""
        assert fresh_list.get_total_notes() == 0

        res_again = client.delete(f"/api/v1/notes/{note['id']}")
        assert res_again.status_code == 404
        assert res_again.json()["detail"] == "Note not found"


class TestCompletion:
    def test_toggle_updates_stats(self):
        ids = [create_note(title=f"N{i}")["id"] for i in range(3)]
        res = client.post(f"/api/v1/notes/{ids[1]}/toggle")
        assert res.status_code == 200
        assert res.json()["is_completed"] is True

        stats = client.get("/api/v1/notes/stats").json()
        assert stats == {"total": 3, "uncompleted": 2}

    def test_set_completion(self):
        note = create_note()
        res = client.put(f"/api/v1/notes/{note['id']}/completion", json={"completed": True})
        assert res.status_code == 200
        assert res.json()["is_completed"] is True
        res = client.put(f"/api/v1/notes/{note['id']}/completion", json={"completed": False})
        assert res.json()["is_completed"] is False

    def test_toggle_not_found(self):
        res = client.post("/api/v1/notes/77/toggle")
        assert res.status_code == 404


class TestConfirmBeforeEdit:
    def test_requires_confirm_flag(self):
        note = create_note(title="Locked", variant="confirm_before_edit")
        res = client.patch(f"/api/v1/notes/{note['id']}", json={"title": "Changed"})
        assert res.status_code == 409
        assert res.json()["detail"] == "Edit requires confirmation"

        res = client.patch(f"/api/v1/notes/{note['id']}?confirm=true", json={"title": "Changed"})
        assert res.status_code == 200
        assert res.json()["title"] == "Changed"

    def test_auto_confirm_setting(self, monkeypatch):
        monkeypatch.setenv("AUTO_CONFIRM_EDITS", "true")
        note = create_note(title="Locked", variant="confirm_before_edit")
        res = client.patch(f"/api/v1/notes/{note['id']}", json={"content": "ok"})
        assert res.status_code == 200


class TestListSearchSort:
    def seed(self, count=6):
        ids = []
        for i in range(count):
            note = create_note(title=f"Task {i}", content=f"Desc {i}")
            if i % 2 == 0:
                client.post(f"/api/v1/notes/{note['id']}/toggle")
            ids.append(note["id"])
        return ids

    def test_default_list_keeps_insertion_order(self):
        ids = self.seed(4)
        data = client.get("/api/v1/notes/").json()
        assert [n["id"] for n in data["items"]] == ids
        assert data["total"] == 4
        assert data["limit"] == 50
        assert data["offset"] == 0

    def test_pagination(self):
        ids = self.seed(7)
        page = client.get("/api/v1/notes/?limit=3&offset=3").json()
        assert [n["id"] for n in page["items"]] == ids[3:6]
        assert page["total"] == 7

    def test_filter_completed(self):
        self.seed(6)
        done = client.get("/api/v1/notes/?completed=true").json()
        assert all(n["is_completed"] for n in done["items"])
        assert done["total"] == 3

    def test_search_is_case_sensitive(self):
        create_note(title="category", content="x")
        create_note(title="dog", content="x")
        create_note(title="concatenate", content="x")
        data = client.get("/api/v1/notes/?q=cat").json()
        assert [n["title"] for n in data["items"]] == ["category", "concatenate"]

    def test_sort_by_status(self):
        ids = self.seed(3)
        data = client.get("/api/v1/notes/?sort=status").json()
        assert [n["id"] for n in data["items"]] == [ids[1], ids[0], ids[2]]

    def test_invalid_sort(self):
        res = client.get("/api/v1/notes/?sort=title")
        assert res.status_code == 400


class TestValidationErrors:
    def test_create_empty_title(self, fresh_list):
        res = client.post("/api/v1/notes/", json={"title": "", "content": "x"})
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)
        assert fresh_list.get_total_notes() == 0

    def test_create_blank_content(self):
        res = client.post("/api/v1/notes/", json={"title": "t", "content": "   "})
        assert res.status_code == 422

    def test_patch_empty_content(self):
        note = create_note()
        res = client.patch(f"/api/v1/notes/{note['id']}", json={"content": ""})
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"


class TestSerialization:
    def test_note_out_round_trip(self, fresh_list):
        note = fresh_list.add_note("A", "B")
        out = NoteOut.model_validate(note)
        restored = NoteOut.model_validate_json(out.model_dump_json())
        assert restored == out
        assert restored.created_at == note.created_at
