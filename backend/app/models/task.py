"""Task models — personal to-do items owned by a single user."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

TITLE_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200
# Bounds of the 32-bit integer column
POSITION_MIN = -(2**31)
POSITION_MAX = 2**31 - 1


class TaskCategory(str, enum.Enum):
    TODO = "To-Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Email of the creating user; there is no foreign key to users
    owner: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str] = mapped_column(String(DESCRIPTION_MAX_LENGTH), default="")
    category: Mapped[str] = mapped_column(String(20), default=TaskCategory.TODO.value)
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
