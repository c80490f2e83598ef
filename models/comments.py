from sqlmodel import SQLModel, Field
from datetime import datetime
from .helper import id_generator, utcnow


class Comment(SQLModel, table=True):
    """Comment left on a task by a user."""
    id: str = Field(default_factory=id_generator(), primary_key=True)
    task_id: str = Field(foreign_key="task.id", index=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    content: str
    created_at: datetime = Field(default_factory=utcnow, index=True)
