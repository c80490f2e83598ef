from sqlmodel import SQLModel, Field
from datetime import datetime
from .helper import id_generator, utcnow


class Attachment(SQLModel, table=True):
    """File metadata attached to a task; the bytes live in external storage."""
    id: str = Field(default_factory=id_generator(), primary_key=True)
    task_id: str = Field(foreign_key="task.id", index=True)
    filename: str = Field(index=True)
    file_url: str
    file_type: str
    file_size: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow, index=True)
