from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from models.boards import TaskPriority


class CreateTaskRequest(BaseModel):
    """Schema for appending a task to a column."""
    title: str = Field(..., min_length=1, description="Task title")
    description: Optional[str] = Field(default=None, description="Task description")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    due_date: Optional[datetime] = Field(default=None, description="Due date")


class UpdateTaskRequest(BaseModel):
    """Schema for updating task metadata; position only changes through reorder."""
    title: Optional[str] = Field(default=None, min_length=1, description="New task title")
    description: Optional[str] = Field(default=None, description="New task description")
    priority: Optional[TaskPriority] = Field(default=None, description="New priority")
    due_date: Optional[datetime] = Field(default=None, description="New due date")


class ReorderTasksRequest(BaseModel):
    """Schema for moving a task within a column or into another column."""
    task_id: str = Field(..., description="Task being moved")
    source_column_id: str = Field(..., description="Column the client saw the task in")
    destination_column_id: str = Field(..., description="Column to move the task to")
    source_index: int = Field(..., ge=0, description="Index the client saw the task at")
    destination_index: int = Field(..., ge=0, description="Index in the destination column")


class CreateAttachmentRequest(BaseModel):
    """Schema for recording an uploaded file against a task."""
    filename: str = Field(..., description="Original file name")
    file_url: str = Field(..., description="URL where the file is stored")
    file_type: str = Field(..., description="MIME type of the file")
    file_size: int = Field(default=0, ge=0, description="File size in bytes")


class CreateCommentRequest(BaseModel):
    """Schema for commenting on a task."""
    content: str = Field(..., min_length=1, description="Comment text")


# Response Schemas
class AttachmentResponse(BaseModel):
    """Schema for attachment responses."""
    id: str = Field(..., description="Attachment ID")
    task_id: str = Field(..., description="Owning task ID")
    filename: str = Field(..., description="Original file name")
    file_url: str = Field(..., description="URL where the file is stored")
    file_type: str = Field(..., description="MIME type of the file")
    file_size: int = Field(..., description="File size in bytes")
    created_at: datetime = Field(..., description="Upload timestamp")

    model_config = {"from_attributes": True}


class CommentResponse(BaseModel):
    """Schema for comment responses."""
    id: str = Field(..., description="Comment ID")
    task_id: str = Field(..., description="Owning task ID")
    user_id: str = Field(..., description="Author user ID")
    content: str = Field(..., description="Comment text")
    created_at: datetime = Field(..., description="Creation timestamp")

    model_config = {"from_attributes": True}


class TaskResponse(BaseModel):
    """Schema for task responses."""
    id: str = Field(..., description="Task ID")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(default=None, description="Task description")
    priority: TaskPriority = Field(..., description="Task priority")
    due_date: Optional[datetime] = Field(default=None, description="Due date")
    column_id: str = Field(..., description="Owning column ID")
    position: int = Field(..., description="Zero-based position within the column")

    model_config = {"from_attributes": True}


class TaskDetailResponse(TaskResponse):
    """Schema for detailed task responses including attachments and comments."""
    attachments: List[AttachmentResponse] = Field(default_factory=list, description="Attached files")
    comments: List[CommentResponse] = Field(default_factory=list, description="Comments, newest first")
