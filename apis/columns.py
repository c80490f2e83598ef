from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from database import get_session
from models.auth import User
from models.boards import BoardColumn
from helpers.auth import get_current_user, get_owned_board, get_owned_column
from helpers.errors import translate_ordering_errors
from helpers.ordering import column_order
from ws_service.manager import manager
from .schemas.boards import (
    ColumnResponse, CreateColumnRequest, UpdateColumnRequest, ReorderColumnsRequest
)
from apis.schemas.auth import MessageResponse
from typing import List

router = APIRouter(tags=["columns"])


@router.post("/boards/{board_id}/columns", status_code=status.HTTP_201_CREATED)
async def create_column(
    board_id: str,
    column_data: CreateColumnRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> ColumnResponse:
    """Append a column to the end of a board."""
    board = get_owned_board(board_id, user, db_session)

    column = BoardColumn(name=column_data.name, board_id=board.id)
    with translate_ordering_errors():
        column_order.append(db_session, board_id, column)
    db_session.refresh(column)

    await manager.broadcast_board_event(board_id, "column_created", column_id=column.id)
    return ColumnResponse.model_validate(column)


@router.get("/boards/{board_id}/columns")
async def list_columns(
    board_id: str,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> List[ColumnResponse]:
    """List a board's columns in position order."""
    get_owned_board(board_id, user, db_session)

    columns = column_order.sequence(db_session, board_id)
    return [ColumnResponse.model_validate(column) for column in columns]


@router.put("/columns/{column_id}")
async def update_column(
    column_id: str,
    column_data: UpdateColumnRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> ColumnResponse:
    """Rename a column."""
    column = get_owned_column(column_id, user, db_session)

    column.name = column_data.name
    db_session.add(column)
    db_session.commit()
    db_session.refresh(column)

    return ColumnResponse.model_validate(column)


@router.delete("/columns/{column_id}")
async def delete_column(
    column_id: str,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Delete a column and its tasks, closing the gap among the remaining columns."""
    column = get_owned_column(column_id, user, db_session)
    board_id = column.board_id

    with translate_ordering_errors():
        column_order.delete(db_session, column_id)

    await manager.broadcast_board_event(board_id, "column_deleted", column_id=column_id)
    return MessageResponse(message="Column deleted successfully")


@router.post("/columns/reorder")
async def reorder_columns(
    reorder_data: ReorderColumnsRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Move a column to a new index within its board."""
    get_owned_board(reorder_data.board_id, user, db_session)

    with translate_ordering_errors():
        column_order.move_within_scope(
            db_session,
            reorder_data.board_id,
            reorder_data.column_id,
            reorder_data.source_index,
            reorder_data.destination_index
        )

    await manager.broadcast_board_event(reorder_data.board_id, "columns_reordered")
    return MessageResponse(message="Columns reordered successfully")
