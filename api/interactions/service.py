"""
Interaction ledger business logic.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg
from fastapi import HTTPException, status

from auth.schemas import CurrentUser
from posts import service as posts_service

from . import repository
from .schemas import FactKind

logger = logging.getLogger(__name__)


def _require_user(user: CurrentUser | None) -> CurrentUser:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token")
    return user


def _post_not_found(exc: asyncpg.ForeignKeyViolationError) -> HTTPException:
    logger.info("interaction_post_vanished error=%s", exc)
    return HTTPException(status_code=404, detail="Post not found")


async def toggle(kind: FactKind, user: CurrentUser | None, post_id: int) -> bool:
    """
    Flip the user's like/save on a post. Returns True when the fact is now active.

    Not idempotent: two calls restore the prior state.
    """
    user = _require_user(user)
    await posts_service.require_post(post_id)

    try:
        active = await repository.toggle_fact(kind, user_id=user.id, post_id=post_id)
    except asyncpg.ForeignKeyViolationError as exc:
        # Post deleted between the existence check and the insert.
        raise _post_not_found(exc) from exc
    logger.info("fact_toggled kind=%s user_id=%s post_id=%s active=%s", kind.value, user.id, post_id, active)
    return active


async def like_status(user: CurrentUser, post_id: int) -> dict[str, Any]:
    liked = await repository.fact_exists(FactKind.LIKE, user_id=user.id, post_id=post_id)
    like_count = await repository.count_facts_for_post(FactKind.LIKE, post_id)
    return {"liked": liked, "likeCount": like_count}


async def add_comment(user: CurrentUser, post_id: int, content: str) -> dict[str, Any]:
    text = (content or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Comment cannot be empty.")

    await posts_service.require_post(post_id)
    try:
        comment = await repository.insert_comment(user_id=user.id, post_id=post_id, content=text)
    except asyncpg.ForeignKeyViolationError as exc:
        raise _post_not_found(exc) from exc
    logger.info("comment_added comment_id=%s user_id=%s post_id=%s", comment["id"], user.id, post_id)
    return comment


async def list_comments(post_id: int, *, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
    await posts_service.require_post(post_id)
    return await repository.list_comments(post_id, limit=limit, offset=offset)
