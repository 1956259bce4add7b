"""
Pydantic models for Task API request/response validation.
"""

from typing import Optional

from pydantic import BaseModel, Field, StrictInt

# Range of a SQLite INTEGER column
SQLITE_MIN_INTEGER = -(2**63)
SQLITE_MAX_INTEGER = 2**63 - 1


class Task(BaseModel):
    """A task as sent and received over HTTP.

    ``id`` is null (or omitted) in create requests and assigned by the store.
    """

    id: Optional[StrictInt] = Field(None, description="Store assigned identifier, null before creation")
    task: str = Field(description="Task description, must not be empty")


class DeleteResponse(BaseModel):
    """Acknowledgment returned after a task is deleted."""

    msg: str = "Task Deleted"


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
