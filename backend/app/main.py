"""FastAPI application factory and HTTP controllers.

Controllers are intentionally thin: they accept requests, delegate to
`RegistrationService`, and return JSON responses. The application is
assembled by `create_app` from an explicit settings object and engine;
routes come from the `ROUTES` table below rather than decorators.

Endpoints implemented:
- GET /api/users
- POST /api/users
- GET /health
- GET /
"""

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse, HTMLResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from pathlib import Path
from typing import List, Optional
import json
import logging
import os
import time
import uuid
from .database import build_engine, create_db_and_tables, get_session, wait_for_database
from . import services
from .schemas import StudentIn, StudentOut
from .config import Settings, settings as default_settings

logger = logging.getLogger("app.api")

# Opened directly by browsers during local development; nginx serves it in compose.
static_dir = Path(__file__).resolve().parents[2] / "frontend"


def configure_logging(level: str) -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level)
    logging.getLogger("app").setLevel(level)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        if request.url.path.startswith("/api"):
            logger.exception(
                "request_failed %s",
                json.dumps(
                    {
                        "request_id": req_id,
                        "path": request.url.path,
                        "method": request.method,
                        "duration_ms": elapsed_ms,
                        "client": _client_host(request),
                    },
                    ensure_ascii=True,
                ),
            )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    if request.url.path.startswith("/api"):
        logger.info(
            "request_done %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                    "client": _client_host(request),
                },
                ensure_ascii=True,
            ),
        )
    return response


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Turn any data store failure into a generic 500.

    The session dependency has already rolled back by the time this runs,
    so a failed insert leaves nothing behind.
    """
    logger.error(
        "database_error %s",
        json.dumps(
            {
                "request_id": getattr(request.state, "request_id", ""),
                "path": request.url.path,
                "method": request.method,
                "error": type(exc).__name__,
            },
            ensure_ascii=True,
        ),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "database error"})


def list_users(db: Session = Depends(get_session)):
    """Return every registered student.

    No pagination or filtering; ordering is whatever the database's
    default scan produces.
    """
    students = services.RegistrationService(db).list_students()
    return [StudentOut.model_validate(s) for s in students]


def create_user(payload: StudentIn, request: Request, db: Session = Depends(get_session)):
    """Register a student and return it with its new id.

    Not idempotent: posting the same body twice creates two records.
    """
    student = services.RegistrationService(db).register(payload)
    logger.info(
        "student_registered %s",
        json.dumps(
            {"request_id": getattr(request.state, "request_id", ""), "id": student.id},
            ensure_ascii=True,
        ),
    )
    return StudentOut.model_validate(student)


def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


def home():
    """Minimal homepage for quick manual testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="UTF-8" />
      <title>Student Registration API</title>
      <style>
        body { font-family: Arial, sans-serif; margin: 32px; }
        a { color: #0a6; }
        .card { max-width: 640px; padding: 16px; border: 1px solid #ddd; border-radius: 8px; }
      </style>
    </head>
    <body>
      <div class="card">
        <h1>Student Registration API</h1>
        <p>Quick links for local testing:</p>
        <ul>
          <li><a href="/docs">Swagger UI</a></li>
          <li><a href="/static/index.html?api=">Registration form</a></li>
          <li><a href="/api/users">Registered students (JSON)</a></li>
        </ul>
      </div>
    </body>
    </html>
    """


# (method, path, endpoint, extra add_api_route options)
ROUTES = [
    ("GET", "/api/users", list_users, {"response_model": List[StudentOut]}),
    ("POST", "/api/users", create_user, {"response_model": StudentOut}),
    ("GET", "/health", health, {}),
    ("GET", "/", home, {"response_class": HTMLResponse}),
]


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Build the application around an explicit settings object and engine.

    When `engine` is omitted one is built from `settings`. Startup blocks
    until the database answers (raising `DatabaseUnavailableError` after
    the configured retries) and creates missing tables when
    `SCHEMA_AUTO_CREATE` is on.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)
    if engine is None:
        engine = build_engine(settings)
    wait_for_database(engine, settings.DB_CONNECT_RETRIES, settings.DB_CONNECT_BACKOFF_SECONDS)
    if settings.SCHEMA_AUTO_CREATE:
        create_db_and_tables(engine)

    app = FastAPI(title="Student Registration API")
    app.state.engine = engine
    app.state.settings = settings

    if settings.ALLOW_DEV_CORS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    app.middleware("http")(request_context_middleware)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    for method, path, endpoint, options in ROUTES:
        app.add_api_route(path, endpoint, methods=[method], **options)
    logger.info("app_ready %s", json.dumps({"database": settings.database_url.get_backend_name()}))
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:create_app", factory=True, host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
