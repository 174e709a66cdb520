"""Partial task updates: only the slots a caller supplied are applied."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.core.exceptions import ValidationError
from app.models.task import (
    Task,
    TaskCategory,
    TITLE_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    POSITION_MIN,
    POSITION_MAX,
)


class TaskPatch(BaseModel):
    """Optional, independently settable task fields.

    A slot counts as supplied when it was passed to the constructor, even if
    the value is ``None``; unsupplied slots never touch the stored task.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    description: str | None = None
    category: TaskCategory | None = None
    position: int | None = Field(None, ge=POSITION_MIN, le=POSITION_MAX)

    def changes(self) -> dict:
        """Supplied slots as column values."""
        values = self.model_dump(include=self.model_fields_set)
        if isinstance(values.get("category"), TaskCategory):
            values["category"] = values["category"].value
        return values

    def validate_fields(self) -> None:
        supplied = self.model_fields_set
        if "title" in supplied and not is_valid_title(self.title):
            raise ValidationError("Title is required (max 50 characters).")
        if "description" in supplied and (
            self.description is None or not is_valid_description(self.description)
        ):
            raise ValidationError("Description must be within 200 characters.")
        if "category" in supplied and self.category is None:
            raise ValidationError("Category must be one of: " + ", ".join(c.value for c in TaskCategory))


def is_valid_title(title: str | None) -> bool:
    return bool(title) and len(title) <= TITLE_MAX_LENGTH


def is_valid_description(description: str) -> bool:
    return len(description) <= DESCRIPTION_MAX_LENGTH


def apply_patch(task: Task, patch: TaskPatch, now: datetime) -> Task:
    """Merge the supplied slots into ``task`` and refresh its timestamp."""
    for key, value in patch.changes().items():
        setattr(task, key, value)
    task.timestamp = now
    return task
