import logging
import time

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import EditNotConfirmedError, InvalidArgumentError, NotFoundError
from .repositories import TodoList, get_todo_list
from .routers import notes as notes_router
from .settings import get_settings
from .utils import configure_logging

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "notes",
        "description": "Create, edit, complete, search, sort and delete notes in an in-memory list.",
    },
]

app = FastAPI(
    title="Todo Notes",
    description="HTTP surface over an in-memory list of notes with completion tracking.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

_settings = get_settings()
configure_logging(_settings.log_level)
logger = logging.getLogger("todo_notes.api")

allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "request",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "ms": (time.perf_counter() - start) * 1000.0,
        },
    )
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": str(exc),
            "detail": [{"loc": ["body", exc.field] if exc.field else ["body"], "msg": str(exc)}],
        },
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Note not found"})


@app.exception_handler(EditNotConfirmedError)
async def not_confirmed_handler(request: Request, exc: EditNotConfirmedError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": "Edit requires confirmation"})


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(notes: TodoList = Depends(get_todo_list)):
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the number of notes held.
    """
    return {"message": "Healthy", "notes": notes.get_total_notes()}


app.include_router(notes_router.router)
