"""
Task repository operations.

Translates between Task models and store rows. Every operation takes the
shared TaskDatabase handle explicitly and runs the blocking sqlite3 call in
a worker thread, so a request waiting on the store does not hold up other
requests. Store failures are logged here and re-raised as ApiError; no
store detail leaves this module.
"""

import asyncio
import logging
import sqlite3
from typing import List

from .database import TaskDatabase
from .errors import ApiError, ErrorKind
from .models import Task

logger = logging.getLogger(__name__)


async def list_tasks(db: TaskDatabase) -> List[Task]:
    """Return all tasks in store order."""
    try:
        rows = await asyncio.to_thread(db.fetch_all_tasks)
    except sqlite3.Error as e:
        logger.error(f"Failed to list tasks: {e}")
        raise ApiError(ErrorKind.INTERNAL_SERVER_ERROR)
    return [Task(**row) for row in rows]


async def get_task(db: TaskDatabase, task_id: int) -> Task:
    """
    Return the task with ``task_id``.

    A failing lookup is reported as NotFound, same as a missing row.
    """
    try:
        row = await asyncio.to_thread(db.fetch_task, task_id)
    except sqlite3.Error as e:
        logger.error(f"Failed to fetch task {task_id}: {e}")
        raise ApiError(ErrorKind.NOT_FOUND)
    if row is None:
        raise ApiError(ErrorKind.NOT_FOUND)
    return Task(**row)


async def create_task(db: TaskDatabase, task: Task) -> Task:
    """Insert a new task. The caller must not choose the id."""
    if task.id is not None or task.task == "":
        raise ApiError(ErrorKind.BAD_REQUEST)

    try:
        task_id = await asyncio.to_thread(db.insert_task, task.task)
    except sqlite3.Error as e:
        logger.error(f"Failed to insert task: {e}")
        raise ApiError(ErrorKind.INTERNAL_SERVER_ERROR)

    logger.debug(f"Created task {task_id}")
    return Task(id=task_id, task=task.task)


async def update_task(db: TaskDatabase, task_id: int, task: Task) -> Task:
    """
    Replace the text of an existing task.

    A body id, when present, has to match ``task_id``. Validation happens
    before the store is touched.
    """
    if task.id is not None and task.id != task_id:
        raise ApiError(ErrorKind.BAD_REQUEST)
    if task.task == "":
        raise ApiError(ErrorKind.BAD_REQUEST)

    await get_task(db, task_id)

    try:
        changed = await asyncio.to_thread(db.update_task, task_id, task.task)
    except sqlite3.Error as e:
        logger.error(f"Failed to update task {task_id}: {e}")
        raise ApiError(ErrorKind.INTERNAL_SERVER_ERROR)

    # Row removed between the existence check and the write
    if changed == 0:
        raise ApiError(ErrorKind.NOT_FOUND)

    logger.debug(f"Updated task {task_id}")
    return Task(id=task_id, task=task.task)


async def delete_task(db: TaskDatabase, task_id: int) -> None:
    """Delete an existing task."""
    await get_task(db, task_id)

    try:
        removed = await asyncio.to_thread(db.delete_task, task_id)
    except sqlite3.Error as e:
        logger.error(f"Failed to delete task {task_id}: {e}")
        raise ApiError(ErrorKind.INTERNAL_SERVER_ERROR)

    if removed == 0:
        raise ApiError(ErrorKind.NOT_FOUND)

    logger.debug(f"Deleted task {task_id}")
