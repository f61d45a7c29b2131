"""
FastAPI router for the post catalog and image uploads.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from auth import dependencies as auth_dependencies
from auth.schemas import CurrentUser

from . import service
from .schemas import PostType

router = APIRouter()


@router.post("/upload")
async def upload_image(
    image: UploadFile = File(...),
    _: CurrentUser = Depends(auth_dependencies.get_current_user),
) -> dict:
    uploaded = await service.upload_image(image)
    return {"success": True, "imageUrl": uploaded.url, "publicId": uploaded.public_id}


@router.post("/posts")
async def create_post(
    title: str = Form(..., min_length=1, max_length=255),
    content: str = Form(..., min_length=1),
    category_id: int | None = Form(default=None),
    post_type: PostType = Form(default=PostType.BLOG),
    image: UploadFile | None = File(default=None),
    current_user: CurrentUser = Depends(auth_dependencies.get_current_user),
) -> dict:
    post = await service.create_post(
        current_user,
        title=title,
        content=content,
        category_id=category_id,
        post_type=post_type,
        image=image,
    )
    return {"success": True, "message": "Post created successfully!", "post": post}


@router.get("/posts")
async def list_posts(
    type: str | None = Query(default=None, max_length=20),
    category: int | None = Query(default=None),
    author: str | None = Query(default=None, max_length=50),
) -> dict:
    posts = await service.list_posts(post_type=type, category_id=category, author=author)
    return {"success": True, "posts": posts}


@router.get("/my-posts")
async def list_my_posts(
    current_user: CurrentUser = Depends(auth_dependencies.get_current_user),
) -> dict:
    posts = await service.list_my_posts(current_user)
    return {"success": True, "posts": posts}


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: int,
    current_user: CurrentUser = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.delete_post(current_user, post_id)
    return {"success": True, "message": "Post deleted successfully"}


@router.post("/posts/{post_id}/view")
async def record_view(post_id: int) -> dict:
    return {"success": await service.record_view(post_id)}
