"""Task API endpoints — create, list, update, delete."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, Field

from app.core.database import DocumentStore, get_store
from app.models.task import Task, TaskCategory, POSITION_MIN, POSITION_MAX
from app.services.task_patch import TaskPatch
from app.services.task_repository import TaskRepository

router = APIRouter(prefix="/tasks", tags=["tasks"])

# Older clients send the owner under "email"
_OWNER_ALIASES = AliasChoices("owner", "email")


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class CreateTaskRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    owner: str | None = Field(None, validation_alias=_OWNER_ALIASES)


class UpdateTaskRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    category: TaskCategory | None = None
    position: int | None = Field(None, ge=POSITION_MIN, le=POSITION_MAX)
    owner: str | None = Field(None, validation_alias=_OWNER_ALIASES)

    def to_patch(self) -> TaskPatch:
        return TaskPatch(**self.model_dump(exclude_unset=True, exclude={"owner"}))


class DeleteTaskRequest(BaseModel):
    owner: str | None = Field(None, validation_alias=_OWNER_ALIASES)


def get_task_repository(store: DocumentStore = Depends(get_store)) -> TaskRepository:
    return TaskRepository(store)


# ---------------------------------------------------------------------------
# Task CRUD Routes
# ---------------------------------------------------------------------------

@router.post("", status_code=status.HTTP_201_CREATED)
async def api_create_task(
    body: CreateTaskRequest,
    repo: TaskRepository = Depends(get_task_repository),
):
    task = await repo.create_task(body.owner, body.title, body.description)
    return {"message": "Task added successfully!", "id": task.id}


@router.get("/{owner}")
async def api_list_tasks(
    owner: str,
    repo: TaskRepository = Depends(get_task_repository),
):
    """List all tasks belonging to ``owner``."""
    tasks = await repo.list_tasks(owner)
    return [_serialize_task(t) for t in tasks]


@router.put("/{task_id}")
async def api_update_task(
    task_id: str,
    body: UpdateTaskRequest,
    repo: TaskRepository = Depends(get_task_repository),
):
    """Update only the fields present in the request body."""
    task = await repo.update_task(task_id, body.owner, body.to_patch())
    return {"message": "Task updated successfully", "task": _serialize_task(task)}


@router.delete("/{task_id}")
async def api_delete_task(
    task_id: str,
    body: DeleteTaskRequest,
    repo: TaskRepository = Depends(get_task_repository),
):
    await repo.delete_task(task_id, body.owner)
    return {"message": "Task deleted successfully"}


# ---------------------------------------------------------------------------
# Serializer
# ---------------------------------------------------------------------------

def _serialize_task(task: Task) -> dict:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "category": task.category,
        "position": task.position,
        "timestamp": _utc_isoformat(task.timestamp),
        "owner": task.owner,
    }


def _utc_isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
