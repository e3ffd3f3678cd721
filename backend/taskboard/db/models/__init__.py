"""Database models: import all so Base.metadata is populated."""

from taskboard.db.models.project import Project
from taskboard.db.models.task import Task
from taskboard.db.models.user import User

__all__ = ["Project", "Task", "User"]
