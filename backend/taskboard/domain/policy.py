"""Access policy for projects and tasks.

Pure decision functions, no side effects, no store access. Single-owner model:
a project's owner may do anything to it, and a task is governed by its parent
project's owner. There are no roles, groups or delegation.
"""

from enum import StrEnum

from taskboard.domain.entities import Project, Task, User
from taskboard.domain.errors import ErrorKind, Failure


class Action(StrEnum):
    VIEW = "view"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"


PROJECT_ACTIONS = frozenset({Action.VIEW, Action.UPDATE, Action.DELETE, Action.RESTORE})
TASK_ACTIONS = frozenset({Action.VIEW, Action.UPDATE, Action.DELETE})


def owner_of(resource: Project | Task) -> int | None:
    """Resolve the owning user id of a resource.

    Tasks always resolve through their loaded parent project; a task without
    one has no owner.
    """
    if isinstance(resource, Project):
        return resource.owner_user_id
    if isinstance(resource, Task):
        if resource.project is None:
            return None
        return resource.project.owner_user_id
    return None


def authorize(actor: User | None, action: Action | str, resource: Project | Task) -> bool:
    """Decide whether ``actor`` may perform ``action`` on ``resource``.

    Never raises. Unknown actions, missing actors and unresolvable owners
    are all denied. Ownership survives soft-delete, so trashed projects are
    judged like active ones.
    """
    if actor is None:
        return False
    try:
        action = Action(action)
    except ValueError:
        return False

    allowed_actions = PROJECT_ACTIONS if isinstance(resource, Project) else TASK_ACTIONS
    if action not in allowed_actions:
        return False

    owner_id = owner_of(resource)
    return owner_id is not None and actor.id == owner_id


def check_access(actor: User | None, action: Action | str, resource: Project | Task) -> Failure | None:
    """Return the Failure that denies access, or None when allowed.

    Distinguishes a missing identity (UNAUTHENTICATED) from an identified
    actor who is not permitted (FORBIDDEN).
    """
    if actor is None:
        return Failure(ErrorKind.UNAUTHENTICATED)
    if not authorize(actor, action, resource):
        return Failure(ErrorKind.FORBIDDEN)
    return None
