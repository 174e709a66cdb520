"""Task repository — CRUD for personal tasks, scoped to the owning user."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy import select, delete

from app.core.database import DocumentStore
from app.core.exceptions import NotFoundOrForbidden, ValidationError
from app.models.task import Task, TaskCategory
from app.services.task_patch import TaskPatch, apply_patch, is_valid_title, is_valid_description

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_owner(owner: str | None) -> str:
    if not owner:
        raise ValidationError("User email is required.")
    return owner


class TaskRepository:
    """Every read and write is filtered on ``owner``.

    A task that exists but belongs to somebody else is indistinguishable from
    one that does not exist.
    """

    def __init__(
        self,
        store: DocumentStore,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._now = now

    async def create_task(
        self,
        owner: str | None,
        title: str | None,
        description: str | None = None,
    ) -> Task:
        """Create a task in the To-Do column."""
        owner = _require_owner(owner)
        if not is_valid_title(title):
            raise ValidationError("Title is required (max 50 characters).")
        if description and not is_valid_description(description):
            raise ValidationError("Description must be within 200 characters.")

        task = Task(
            owner=owner,
            title=title,
            description=description or "",
            category=TaskCategory.TODO.value,
            timestamp=self._now(),
        )
        async with self._store.session() as db:
            db.add(task)
            await db.commit()

        logger.debug("Created task %s for %s", task.id, owner)
        return task

    async def list_tasks(self, owner: str | None) -> list[Task]:
        """List an owner's tasks; positioned tasks first, then by timestamp."""
        owner = _require_owner(owner)
        query = (
            select(Task)
            .where(Task.owner == owner)
            .order_by(Task.position.is_(None), Task.position, Task.timestamp)
        )
        async with self._store.session() as db:
            result = await db.execute(query)
            return list(result.scalars().all())

    async def update_task(
        self,
        task_id: str,
        owner: str | None,
        patch: TaskPatch,
    ) -> Task:
        """Apply the supplied fields of ``patch`` and return the updated task."""
        owner = _require_owner(owner)
        patch.validate_fields()

        async with self._store.session() as db:
            result = await db.execute(
                select(Task).where(Task.id == task_id, Task.owner == owner)
            )
            task = result.scalar_one_or_none()
            if not task:
                raise NotFoundOrForbidden("Task not found or access denied.")

            apply_patch(task, patch, self._now())
            await db.commit()

        return task

    async def delete_task(self, task_id: str, owner: str | None) -> None:
        owner = _require_owner(owner)
        async with self._store.session() as db:
            result = await db.execute(
                delete(Task).where(Task.id == task_id, Task.owner == owner)
            )
            await db.commit()

        if result.rowcount == 0:
            raise NotFoundOrForbidden("Task not found or access denied.")
        logger.debug("Deleted task %s for %s", task_id, owner)
