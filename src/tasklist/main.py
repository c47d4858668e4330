import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import PersistenceError
from .logging_setup import setup_logging
from .persistence import get_persistence
from .routers import tasks as tasks_router
from .settings import Settings, get_settings
from .store import TaskStore
from .view import TaskView

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Task list intents: add, toggle, edit, delete, clear completed and filter.",
    },
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, view: Optional[TaskView] = None) -> FastAPI:
    """
    Build the application around one TaskView.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        view: Prebuilt view (tests pass one wired to in-memory persistence).
              When omitted, a TaskStore over the configured backend is created.
    """
    settings = settings or get_settings()
    if view is None:
        view = TaskView(TaskStore(get_persistence(settings)))

    app = FastAPI(
        title="Task List",
        description="Single-user task list with write-through local persistence.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.view = view
    app.state.settings = settings

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

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

    @app.exception_handler(PersistenceError)
    async def persistence_exception_handler(request: Request, exc: PersistenceError) -> JSONResponse:
        """
        The change is kept in memory for this session but could not be saved.
        """
        logger.warning("%s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={
                "error": "PersistenceError",
                "message": "Changes are kept for this session but could not be saved",
                "detail": str(exc),
            },
        )

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(tasks_router.router)
    return app


_settings = get_settings()
setup_logging(_settings.log_level, _settings.log_file)
app = create_app(_settings)
