"""
Auth business logic.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _to_current_user(user_row: dict) -> schemas.CurrentUser:
    return schemas.CurrentUser(
        id=int(user_row["id"]),
        username=str(user_row["username"]),
        email=str(user_row["email"]),
        role=schemas.Role(str(user_row["role"])),
    )


def _issue_token(user: schemas.CurrentUser) -> str:
    return security.build_access_token(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role.value,
    )


async def register(payload: schemas.RegisterRequest) -> schemas.AuthResponse:
    if await repository.user_exists(username=payload.username, email=payload.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists",
        )

    password_hash = security.hash_password(payload.password)
    try:
        user_row = await repository.create_user(
            username=payload.username,
            email=payload.email,
            password_hash=password_hash,
            role=payload.role.value,
        )
    except asyncpg.UniqueViolationError as exc:
        # Lost a race with a concurrent registration.
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists",
        ) from exc

    user = _to_current_user(user_row)
    logger.info("user_registered user_id=%s role=%s", user.id, user.role.value)
    return schemas.AuthResponse(token=_issue_token(user), user=user.to_response())


async def login(payload: schemas.LoginRequest) -> schemas.AuthResponse:
    user_row = await repository.get_user_by_email(payload.email)
    is_valid = user_row is not None and security.verify_password(
        payload.password, str(user_row.get("password_hash") or "")
    )
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    user = _to_current_user(user_row)
    return schemas.AuthResponse(token=_issue_token(user), user=user.to_response())


async def get_user_from_access_token(access_token: str) -> schemas.CurrentUser:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject.",
        )

    user_row = await repository.get_user_by_id(int(subject))
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
        )
    return _to_current_user(user_row)
