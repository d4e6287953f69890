from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import NotFoundError, TaskError, ValidationError
from .logging_setup import setup_logging
from .routers import tasks as tasks_router
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Remote procedures for creating, reading, updating and deleting tasks.",
    },
]

_settings = get_settings()
setup_logging(_settings.log_level)

app = FastAPI(
    title="Task Tracker",
    description="Typed remote-procedure API for a minimal task tracker.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS = {ValidationError: 422, NotFoundError: 404}


def _error_response(status_code: int, kind: str, message: str, detail=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": kind, "message": message, "detail": jsonable_encoder(detail)},
    )


# Global exception handlers for consistent JSON on every rejected request
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    return _error_response(422, ValidationError.kind, "Request validation failed", exc.errors())


@app.exception_handler(TaskError)
async def task_error_handler(request: Request, exc: TaskError) -> JSONResponse:
    """
    Map store-level failures to HTTP: ValidationError -> 422, NotFoundError -> 404.
    """
    return _error_response(_STATUS.get(type(exc), 500), exc.kind, exc.message, exc.detail)


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the active storage backend.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


app.include_router(tasks_router.router)

__all__ = ["app", "openapi_tags"]
