"""Task Pydantic schemas for API requests and responses.

The completion flag is ``is_done``; ``done`` is accepted as an input alias.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from taskboard.domain.entities import Task

PriorityValue = Literal["low", "medium", "high"]


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, max_length=255)
    is_done: bool = Field(False, validation_alias=AliasChoices("is_done", "done"))
    priority: PriorityValue | None = None
    due_date: date | None = None


class TaskUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(None, min_length=1, max_length=255)
    is_done: bool | None = Field(None, validation_alias=AliasChoices("is_done", "done"))
    priority: PriorityValue | None = None
    due_date: date | None = None

    @field_validator("title", "is_done")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("This field may not be null.")
        return value


class TaskResponse(BaseModel):
    id: int
    project_id: int
    title: str
    is_done: bool
    priority: str | None
    due_date: date | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            project_id=task.project_id,
            title=task.title,
            is_done=task.is_done,
            priority=task.priority,
            due_date=task.due_date,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )
