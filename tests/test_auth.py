"""
Feature: Register, log in and identify the caller
  As a new or returning user
  I want to obtain a bearer token
  So that I can manage my own boards

Scenario: Register a new account
  When I register with a fresh email
  Then a user is created and a token is returned

Scenario: Register with a taken email
  Then the system returns 409 Conflict

Scenario: Log in with wrong credentials
  Then the system returns 401 Unauthorized

Scenario: Use a revoked or expired token
  Then the system returns 401 Unauthorized
"""

import pytest
from datetime import datetime, timezone, timedelta
from fastapi import HTTPException
from sqlmodel import select
from models.auth import User, Token
from apis.auth import register, login, get_me
from apis.schemas.auth import RegisterRequest, LoginRequest
from helpers.auth import get_auth_token, get_current_user, hash_password


@pytest.mark.asyncio
async def test_register_creates_user_and_token(session):
    result = await register(
        register_data=RegisterRequest(name="Linus", email="linus@example.com", password="kernel123"),
        db_session=session
    )

    assert result.user.email == "linus@example.com"
    assert result.token_type == "bearer"
    stored_user = session.exec(select(User).where(User.email == "linus@example.com")).first()
    assert stored_user.hashed_password == hash_password("kernel123")
    stored_token = session.exec(select(Token).where(Token.access_token == result.access_token)).first()
    assert stored_token.user_id == stored_user.id


@pytest.mark.asyncio
async def test_register_duplicate_email(session, user):
    with pytest.raises(HTTPException) as exc_info:
        await register(
            register_data=RegisterRequest(name="Other Ada", email="ada@example.com", password="another1"),
            db_session=session
        )

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_login_success(session, user):
    result = await login(
        login_data=LoginRequest(email="ada@example.com", password="secret123"),
        db_session=session
    )

    assert result.user.id == user.id
    token = await get_auth_token(authorization=f"Bearer {result.access_token}", db_session=session)
    current_user = await get_current_user(token=token, db_session=session)
    me = await get_me(user=current_user)
    assert me.email == "ada@example.com"


@pytest.mark.asyncio
async def test_login_wrong_password(session, user):
    with pytest.raises(HTTPException) as exc_info:
        await login(
            login_data=LoginRequest(email="ada@example.com", password="wrong-password"),
            db_session=session
        )

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_email(session):
    with pytest.raises(HTTPException) as exc_info:
        await login(
            login_data=LoginRequest(email="nobody@example.com", password="secret123"),
            db_session=session
        )

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_missing_authorization_header(session):
    with pytest.raises(HTTPException) as exc_info:
        await get_auth_token(authorization=None, db_session=session)

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_revoked_token_rejected(session, user):
    token = Token(
        user_id=user.id,
        access_token="revoked_token",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        is_revoked=True
    )
    session.add(token)
    session.commit()

    with pytest.raises(HTTPException) as exc_info:
        await get_auth_token(authorization="Bearer revoked_token", db_session=session)

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_rejected(session, user):
    token = Token(
        user_id=user.id,
        access_token="expired_token",
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)
    )
    session.add(token)
    session.commit()

    with pytest.raises(HTTPException) as exc_info:
        await get_auth_token(authorization="Bearer expired_token", db_session=session)

    assert exc_info.value.status_code == 401
