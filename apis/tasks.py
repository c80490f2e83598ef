from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select
from database import get_session
from models.auth import User
from models.boards import Board, BoardColumn, Task
from models.attachments import Attachment
from models.comments import Comment
from models.helper import utcnow
from apis.schemas.tasks import (
    CreateTaskRequest, UpdateTaskRequest, ReorderTasksRequest, CreateAttachmentRequest,
    CreateCommentRequest, TaskResponse, TaskDetailResponse, AttachmentResponse, CommentResponse
)
from apis.schemas.auth import MessageResponse
from helpers.auth import get_current_user, get_owned_column, get_owned_task
from helpers.errors import translate_ordering_errors
from helpers.ordering import task_order
from ws_service.manager import manager
from settings import logger
from typing import List

router = APIRouter(tags=["tasks"])


@router.post("/columns/{column_id}/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(
    column_id: str,
    task_data: CreateTaskRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> TaskResponse:
    """Append a new task to the end of a column."""
    column = get_owned_column(column_id, user, db_session)
    board_id = column.board_id

    task = Task(
        title=task_data.title,
        description=task_data.description,
        priority=task_data.priority,
        due_date=task_data.due_date,
        column_id=column_id
    )
    with translate_ordering_errors():
        task_order.append(db_session, column_id, task)
    db_session.refresh(task)

    await manager.broadcast_board_event(board_id, "task_created", task_id=task.id, column_id=column_id)
    return TaskResponse.model_validate(task)


@router.get("/columns/{column_id}/tasks")
async def list_tasks(
    column_id: str,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> List[TaskResponse]:
    """List a column's tasks in position order."""
    get_owned_column(column_id, user, db_session)

    tasks = task_order.sequence(db_session, column_id)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/tasks/{task_id}")
async def get_task(
    task_id: str,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> TaskDetailResponse:
    """Get task with attachments and comments."""
    task = get_owned_task(task_id, user, db_session)

    return TaskDetailResponse.model_validate(task)


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str,
    task_data: UpdateTaskRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> TaskResponse:
    """Update task metadata; moving a task goes through /tasks/reorder."""
    task = get_owned_task(task_id, user, db_session)

    # Update only provided fields
    updates = task_data.model_dump(exclude_unset=True)
    if "title" in updates and updates["title"] is not None:
        task.title = updates["title"]
    if "description" in updates:
        task.description = updates["description"]
    if "priority" in updates and updates["priority"] is not None:
        task.priority = updates["priority"]
    if "due_date" in updates:
        task.due_date = updates["due_date"]
    task.updated_at = utcnow()

    db_session.add(task)
    db_session.commit()
    db_session.refresh(task)

    board_id = db_session.get(BoardColumn, task.column_id).board_id
    await manager.broadcast_board_event(board_id, "task_updated", task_id=task.id)
    return TaskResponse.model_validate(task)


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Delete a task with its attachments and comments, closing the gap in its column."""
    task = get_owned_task(task_id, user, db_session)
    column_id = task.column_id
    board_id = db_session.get(BoardColumn, column_id).board_id

    with translate_ordering_errors():
        task_order.delete(db_session, task_id)

    await manager.broadcast_board_event(board_id, "task_deleted", task_id=task_id, column_id=column_id)
    return MessageResponse(message="Task deleted successfully")


@router.post("/tasks/reorder")
async def reorder_tasks(
    reorder_data: ReorderTasksRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Move a task within its column or into another column."""
    get_owned_task(reorder_data.task_id, user, db_session)
    source_column = get_owned_column(reorder_data.source_column_id, user, db_session)
    destination_column = get_owned_column(reorder_data.destination_column_id, user, db_session)
    board_ids = {source_column.board_id, destination_column.board_id}

    with translate_ordering_errors():
        task_order.move_across_scopes(
            db_session,
            reorder_data.task_id,
            reorder_data.source_column_id,
            reorder_data.destination_column_id,
            reorder_data.source_index,
            reorder_data.destination_index
        )

    for board_id in sorted(board_ids):
        await manager.broadcast_board_event(
            board_id, "tasks_reordered",
            task_id=reorder_data.task_id,
            source_column_id=reorder_data.source_column_id,
            destination_column_id=reorder_data.destination_column_id
        )
    return MessageResponse(message="Task reordered successfully")


@router.post("/tasks/{task_id}/attachments", status_code=status.HTTP_201_CREATED)
async def add_task_attachment(
    task_id: str,
    attachment_data: CreateAttachmentRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> AttachmentResponse:
    """Record a file, already stored elsewhere, against a task."""
    get_owned_task(task_id, user, db_session)

    attachment = Attachment(
        task_id=task_id,
        filename=attachment_data.filename,
        file_url=attachment_data.file_url,
        file_type=attachment_data.file_type,
        file_size=attachment_data.file_size
    )

    db_session.add(attachment)
    db_session.commit()
    db_session.refresh(attachment)

    logger.info("Attachment added", extra={"task_id": task_id, "attachment_id": attachment.id})
    return AttachmentResponse.model_validate(attachment)


@router.delete("/attachments/{attachment_id}")
async def delete_attachment(
    attachment_id: str,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Delete an attachment from a task the caller owns."""
    statement = (
        select(Attachment)
        .join(Task)
        .join(BoardColumn)
        .join(Board)
        .where(Attachment.id == attachment_id, Board.user_id == user.id)
    )
    attachment = db_session.exec(statement).first()

    if not attachment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")

    db_session.delete(attachment)
    db_session.commit()

    return MessageResponse(message="Attachment deleted successfully")


@router.post("/tasks/{task_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_task_comment(
    task_id: str,
    comment_data: CreateCommentRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> CommentResponse:
    """Add a comment to a task."""
    get_owned_task(task_id, user, db_session)

    comment = Comment(
        task_id=task_id,
        user_id=user.id,
        content=comment_data.content
    )

    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)

    return CommentResponse.model_validate(comment)


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: str,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Delete a comment; only its author may do so."""
    statement = select(Comment).where(Comment.id == comment_id, Comment.user_id == user.id)
    comment = db_session.exec(statement).first()

    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")

    db_session.delete(comment)
    db_session.commit()

    return MessageResponse(message="Comment deleted successfully")
