from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select
from database import get_session
from models.auth import User
from .schemas.auth import RegisterRequest, LoginRequest, LoginResponse, UserResponse
from helpers.auth import hash_password, issue_token, get_current_user
from settings import logger

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    db_session: Session = Depends(get_session)
) -> LoginResponse:
    """Create an account and log it in."""

    # Email doubles as the login name
    existing_statement = select(User).where(User.email == register_data.email)
    if db_session.exec(existing_statement).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered"
        )

    new_user = User(
        name=register_data.name,
        email=register_data.email,
        hashed_password=hash_password(register_data.password)
    )

    db_session.add(new_user)
    db_session.commit()
    db_session.refresh(new_user)

    token = issue_token(new_user, db_session)
    logger.info("User registered", extra={"user_id": new_user.id})

    return LoginResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_at=token.expires_at,
        user=UserResponse.model_validate(new_user)
    )


@router.post("/login")
async def login(
    login_data: LoginRequest,
    db_session: Session = Depends(get_session)
) -> LoginResponse:
    """Exchange email and password for a bearer token."""

    user_statement = select(User).where(User.email == login_data.email)
    user = db_session.exec(user_statement).first()

    # Same answer for unknown email and wrong password
    if not user or user.hashed_password != hash_password(login_data.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    token = issue_token(user, db_session)

    return LoginResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_at=token.expires_at,
        user=UserResponse.model_validate(user)
    )


@router.get("/me")
async def get_me(
    user: User = Depends(get_current_user)
) -> UserResponse:
    """Return the authenticated user."""
    return UserResponse.model_validate(user)
