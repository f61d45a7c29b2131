"""
Like / save / comment endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from auth.schemas import CurrentUser

from . import schemas, service
from .schemas import FactKind

router = APIRouter()


@router.post("/posts/{post_id}/like")
async def toggle_like(
    post_id: int,
    current_user: CurrentUser = Depends(auth_dependencies.get_current_user),
) -> dict:
    liked = await service.toggle(FactKind.LIKE, current_user, post_id)
    return {
        "success": True,
        "liked": liked,
        "message": "Post liked" if liked else "Post unliked",
    }


@router.get("/posts/{post_id}/like-status")
async def like_status(
    post_id: int,
    current_user: CurrentUser = Depends(auth_dependencies.get_current_user),
) -> dict:
    status = await service.like_status(current_user, post_id)
    return {"success": True, **status}


@router.post("/posts/{post_id}/save")
async def toggle_save(
    post_id: int,
    current_user: CurrentUser = Depends(auth_dependencies.get_current_user),
) -> dict:
    saved = await service.toggle(FactKind.SAVE, current_user, post_id)
    return {
        "success": True,
        "saved": saved,
        "message": "Post saved" if saved else "Post unsaved",
    }


@router.post("/posts/{post_id}/comments")
async def add_comment(
    post_id: int,
    request: schemas.CommentRequest,
    current_user: CurrentUser = Depends(auth_dependencies.get_current_user),
) -> dict:
    comment = await service.add_comment(current_user, post_id, request.content)
    return {"success": True, "comment": schemas.CommentResponse(**comment)}


@router.get("/posts/{post_id}/comments")
async def list_comments(
    post_id: int,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> dict:
    comments = await service.list_comments(post_id, limit=limit, offset=offset)
    return {"success": True, "comments": [schemas.CommentResponse(**c) for c in comments]}
