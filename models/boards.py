from sqlmodel import SQLModel, Field, Relationship
from enum import Enum
from typing import Optional, List
from datetime import datetime
from .helper import id_generator, utcnow
from .attachments import Attachment
from .comments import Comment


class TaskPriority(str, Enum):
    """Urgency levels a task can carry."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Board(SQLModel, table=True):
    """Kanban board owned by a single user; the scope of its columns."""
    id: str = Field(default_factory=id_generator(), primary_key=True)
    name: str = Field(index=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    # Bumped on every change to column membership or order
    revision: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    columns: List["BoardColumn"] = Relationship(
        back_populates="board",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "BoardColumn.position"}
    )


class BoardColumn(SQLModel, table=True):
    """Ordered column within a board; the scope of its tasks."""
    id: str = Field(default_factory=id_generator(), primary_key=True)
    name: str
    board_id: str = Field(foreign_key="board.id", index=True)
    position: int = Field(default=0, index=True)
    # Bumped on every change to task membership or order
    revision: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow)

    board: Optional[Board] = Relationship(back_populates="columns")
    tasks: List["Task"] = Relationship(
        back_populates="column",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "Task.position"}
    )


class Task(SQLModel, table=True):
    """Work item placed at an ordered position inside a column."""
    id: str = Field(default_factory=id_generator(), primary_key=True)
    title: str
    description: Optional[str] = Field(default=None)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    due_date: Optional[datetime] = Field(default=None)
    column_id: str = Field(foreign_key="boardcolumn.id", index=True)
    position: int = Field(default=0, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    column: Optional[BoardColumn] = Relationship(back_populates="tasks")
    attachments: List[Attachment] = Relationship(
        sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
    comments: List[Comment] = Relationship(
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "Comment.created_at.desc()"}
    )
