from pydantic import BaseModel, Field
from typing import List
from datetime import datetime
from .tasks import TaskResponse


class CreateBoardRequest(BaseModel):
    """Schema for creating a new board."""
    name: str = Field(..., min_length=1, description="Board name")


class UpdateBoardRequest(BaseModel):
    """Schema for renaming a board."""
    name: str = Field(..., min_length=1, description="New board name")


class CreateColumnRequest(BaseModel):
    """Schema for appending a column to a board."""
    name: str = Field(..., min_length=1, description="Column name")


class UpdateColumnRequest(BaseModel):
    """Schema for renaming a column; position only changes through reorder."""
    name: str = Field(..., min_length=1, description="New column name")


class ReorderColumnsRequest(BaseModel):
    """Schema for moving a column to another index within its board."""
    board_id: str = Field(..., description="Board the column belongs to")
    column_id: str = Field(..., description="Column being moved")
    source_index: int = Field(..., ge=0, description="Index the client saw the column at")
    destination_index: int = Field(..., ge=0, description="Index to move the column to")


class BoardResponse(BaseModel):
    """Schema for board responses."""
    id: str = Field(..., description="Board ID")
    name: str = Field(..., description="Board name")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last rename timestamp")

    model_config = {"from_attributes": True}


class ColumnResponse(BaseModel):
    """Schema for column responses."""
    id: str = Field(..., description="Column ID")
    name: str = Field(..., description="Column name")
    board_id: str = Field(..., description="Owning board ID")
    position: int = Field(..., description="Zero-based position within the board")

    model_config = {"from_attributes": True}


class ColumnDetailResponse(ColumnResponse):
    """Schema for a column together with its ordered tasks."""
    tasks: List[TaskResponse] = Field(default_factory=list, description="Tasks in position order")


class BoardDetailResponse(BoardResponse):
    """Schema for a board together with its ordered columns and tasks."""
    columns: List[ColumnDetailResponse] = Field(default_factory=list, description="Columns in position order")
