from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from database import get_session
from models.auth import User
from models.boards import Board
from models.helper import utcnow
from helpers.auth import get_current_user, get_owned_board
from .schemas.boards import BoardResponse, BoardDetailResponse, CreateBoardRequest, UpdateBoardRequest
from apis.schemas.auth import MessageResponse
from settings import logger
from typing import List

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get("")
async def list_boards(
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> List[BoardResponse]:
    """List the caller's boards."""
    statement = select(Board).where(Board.user_id == user.id).order_by(Board.name)
    boards = db_session.exec(statement).all()

    return [BoardResponse.model_validate(board) for board in boards]


@router.get("/{board_id}")
async def get_board(
    board_id: str,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> BoardDetailResponse:
    """Get board with its columns and tasks in position order."""
    board = get_owned_board(board_id, user, db_session)

    return BoardDetailResponse.model_validate(board)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_board(
    board_data: CreateBoardRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> BoardResponse:
    """Create a new, empty board."""
    new_board = Board(
        name=board_data.name,
        user_id=user.id
    )

    db_session.add(new_board)
    db_session.commit()
    db_session.refresh(new_board)

    logger.info("Board created", extra={"board_id": new_board.id, "user_id": user.id})
    return BoardResponse.model_validate(new_board)


@router.put("/{board_id}")
async def update_board(
    board_id: str,
    board_data: UpdateBoardRequest,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> BoardResponse:
    """Rename a board."""
    board = get_owned_board(board_id, user, db_session)

    board.name = board_data.name
    board.updated_at = utcnow()

    db_session.add(board)
    db_session.commit()
    db_session.refresh(board)

    return BoardResponse.model_validate(board)


@router.delete("/{board_id}")
async def delete_board(
    board_id: str,
    user: User = Depends(get_current_user),
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Delete a board together with its columns, tasks, attachments and comments."""
    board = get_owned_board(board_id, user, db_session)

    db_session.delete(board)
    db_session.commit()

    logger.info("Board deleted", extra={"board_id": board_id, "user_id": user.id})
    return MessageResponse(message="Board deleted successfully")
