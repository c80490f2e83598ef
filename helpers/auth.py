import hashlib
import secrets
from datetime import datetime, timezone, timedelta
from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlmodel import Session, select
from database import get_session
from models.auth import User, Token
from models.boards import Board, BoardColumn, Task
from settings import TOKEN_TTL_HOURS


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def issue_token(user: User, db_session: Session) -> Token:
    """Create and persist a new bearer token for the user."""
    token = Token(
        user_id=user.id,
        access_token=secrets.token_urlsafe(32),
        expires_at=datetime.now(timezone.utc) + timedelta(hours=TOKEN_TTL_HOURS)
    )
    db_session.add(token)
    db_session.commit()
    db_session.refresh(token)
    return token


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


async def resolve_token(access_token: str, db_session: Session) -> Token:
    """Return the live token row for a raw access token or raise 401."""
    statement = select(Token).where(Token.access_token == access_token)
    token = db_session.exec(statement).first()

    if not token or token.is_revoked or _as_utc(token.expires_at) <= datetime.now(timezone.utc):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token"
        )
    return token


async def get_auth_token(
    authorization: Optional[str] = Header(default=None),
    db_session: Session = Depends(get_session)
) -> Token:
    """Validate the Authorization header and return its token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required"
        )
    return await resolve_token(authorization[len("Bearer "):], db_session)


async def get_current_user(
    token: Token = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> User:
    """Return the user owning the request's token."""
    user = db_session.get(User, token.user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token user no longer exists"
        )
    return user


# Ownership checks answer 404 for foreign resources so ids do not leak

def get_owned_board(board_id: str, user: User, db_session: Session) -> Board:
    statement = select(Board).where(Board.id == board_id, Board.user_id == user.id)
    board = db_session.exec(statement).first()
    if not board:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found")
    return board


def get_owned_column(column_id: str, user: User, db_session: Session) -> BoardColumn:
    statement = (
        select(BoardColumn)
        .join(Board)
        .where(BoardColumn.id == column_id, Board.user_id == user.id)
    )
    column = db_session.exec(statement).first()
    if not column:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Column not found")
    return column


def get_owned_task(task_id: str, user: User, db_session: Session) -> Task:
    statement = (
        select(Task)
        .join(BoardColumn)
        .join(Board)
        .where(Task.id == task_id, Board.user_id == user.id)
    )
    task = db_session.exec(statement).first()
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task
