"""
FastAPI application exposing CRUD operations on tasks.

Routes:
  GET    /            - Redirect to /tasks
  GET    /tasks       - List all tasks
  POST   /tasks       - Create a task
  GET    /tasks/{id}  - Fetch one task
  PUT    /tasks/{id}  - Replace a task's text
  DELETE /tasks/{id}  - Delete a task

The database handle is created once in the lifespan hook, kept on
app.state and handed to every handler through dependency injection.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, Path, Request
from fastapi.responses import RedirectResponse

from . import repository
from .config import load_settings
from .database import TaskDatabase
from .errors import OPENAPI_ERRORS, ApiError, ErrorKind, register_error_handlers
from .models import SQLITE_MAX_INTEGER, SQLITE_MIN_INTEGER, DeleteResponse, Task

logger = logging.getLogger(__name__)


def get_database(request: Request) -> TaskDatabase:
    """
    FastAPI dependency to provide the shared database handle.

    Raises:
        ApiError: If the application started without a database
    """
    db = getattr(request.app.state, "db", None)
    if db is None:
        logger.error("Database not available")
        raise ApiError(ErrorKind.INTERNAL_SERVER_ERROR)
    return db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database and apply migrations on startup, close it on shutdown."""
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    logger.debug(f"Using database {settings.database_path}")
    db = TaskDatabase(settings.database_path)
    try:
        db.run_migrations()
    except Exception:
        db.close()
        raise
    app.state.db = db
    logger.info("Task API starting up")

    yield

    app.state.db = None
    db.close()
    logger.info("Database connection closed")


app = FastAPI(
    title="Task API",
    description="Minimal CRUD service for tasks",
    version="1.0.0",
    docs_url="/swagger-ui",
    openapi_url="/api-docs/openapi.json",
    redoc_url=None,
    lifespan=lifespan
)
register_error_handlers(app)


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    """Log every request with its status and latency."""
    start_time = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(f"{request.method} {request.url.path} -> 500 ({elapsed_ms:.1f}ms, {type(e).__name__})")
        raise
    elapsed_ms = (time.perf_counter() - start_time) * 1000
    logger.debug(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/tasks", status_code=308)


@app.get("/tasks", response_model=List[Task], responses={500: OPENAPI_ERRORS[500]})
async def all_tasks(db: TaskDatabase = Depends(get_database)):
    return await repository.list_tasks(db)


@app.get("/tasks/{task_id}", response_model=Task, responses={404: OPENAPI_ERRORS[404]})
async def task(
    task_id: int = Path(ge=SQLITE_MIN_INTEGER, le=SQLITE_MAX_INTEGER),
    db: TaskDatabase = Depends(get_database)
):
    return await repository.get_task(db, task_id)


@app.post(
    "/tasks",
    response_model=Task,
    status_code=201,
    responses={400: OPENAPI_ERRORS[400], 500: OPENAPI_ERRORS[500]}
)
async def new_task(body: Task, db: TaskDatabase = Depends(get_database)):
    """Create a task. ``id`` must be null or omitted and ``task`` non-empty."""
    return await repository.create_task(db, body)


@app.put(
    "/tasks/{task_id}",
    response_model=Task,
    responses={400: OPENAPI_ERRORS[400], 404: OPENAPI_ERRORS[404]}
)
async def update_task(
    body: Task,
    task_id: int = Path(ge=SQLITE_MIN_INTEGER, le=SQLITE_MAX_INTEGER),
    db: TaskDatabase = Depends(get_database)
):
    """Replace the text of a task. A body ``id`` must match the path."""
    return await repository.update_task(db, task_id, body)


@app.delete("/tasks/{task_id}", response_model=DeleteResponse, responses={404: OPENAPI_ERRORS[404]})
async def delete_task(
    task_id: int = Path(ge=SQLITE_MIN_INTEGER, le=SQLITE_MAX_INTEGER),
    db: TaskDatabase = Depends(get_database)
):
    await repository.delete_task(db, task_id)
    return DeleteResponse()


def main() -> None:
    """Run the service under uvicorn using the configured host and port."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
