"""User API endpoints — first-login registration."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from app.core.database import DocumentStore, get_store
from app.services.user_registry import UserRegistry

router = APIRouter(prefix="/users", tags=["users"])


class RegisterUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    display_name: str | None = Field(None, alias="displayName")


def get_user_registry(store: DocumentStore = Depends(get_store)) -> UserRegistry:
    return UserRegistry(store)


@router.post("")
async def api_register_user(
    body: RegisterUserRequest,
    registry: UserRegistry = Depends(get_user_registry),
):
    """Store the user on first login; later logins are no-ops."""
    registration = await registry.register_user(body.email, body.display_name)
    if not registration.created:
        return {"message": "User already exists", "inserted": False}
    return {"message": "User added successfully", "inserted": True}
