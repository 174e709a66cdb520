from app.models.user import User
from app.models.task import Task, TaskCategory

__all__ = ["User", "Task", "TaskCategory"]
