"""
Post catalog "service layer".

- Validate and buffer image uploads
- Push images to the media store (and clean them up on delete)
- Create / list / delete posts
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg
from fastapi import HTTPException, UploadFile

from auth.schemas import CurrentUser
from core import config, db, media

from . import repository
from .schemas import PostType

# 5 MiB per image.
DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024

logger = logging.getLogger(__name__)


def max_image_bytes() -> int:
    value = config.env_int("MAX_IMAGE_BYTES", DEFAULT_MAX_IMAGE_BYTES)
    return value if value > 0 else DEFAULT_MAX_IMAGE_BYTES


def validate_image(file: UploadFile) -> str:
    """
    Return the upload's content type if it is an image.
    """
    content_type = (file.content_type or "").strip().lower()
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed!")
    return content_type


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Max is {max_bytes} bytes.",
            )

    return bytes(buf)


async def upload_image(file: UploadFile) -> media.UploadedImage:
    content_type = validate_image(file)
    data = await read_upload_bytes(file, max_bytes=max_image_bytes())
    if not data:
        raise HTTPException(status_code=400, detail="No image file provided")

    try:
        return await media.upload_image(data, filename=file.filename or "upload", content_type=content_type)
    except media.MediaStoreError as exc:
        logger.exception("image_upload_failed filename=%s", file.filename)
        raise HTTPException(status_code=502, detail="Image upload failed") from exc


async def create_post(
    user: CurrentUser,
    *,
    title: str,
    content: str,
    category_id: int | None,
    post_type: PostType,
    image: UploadFile | None = None,
) -> dict[str, Any]:
    uploaded = await upload_image(image) if image is not None and image.filename else None

    try:
        post = await repository.insert_post(
            title=title.strip(),
            content=content,
            category_id=category_id,
            author_id=user.id,
            image_url=uploaded.url if uploaded else None,
            image_public_id=uploaded.public_id if uploaded else None,
            post_type=post_type.value,
        )
    except asyncpg.ForeignKeyViolationError as exc:
        # posts.category_id REFERENCES categories; an unknown id is a client error.
        if uploaded is not None:
            await _destroy_image_best_effort(uploaded.public_id, post_id=None)
        raise HTTPException(status_code=400, detail="Invalid category") from exc
    logger.info(
        "post_created post_id=%s author_id=%s role=%s post_type=%s",
        post["id"],
        user.id,
        user.role.value,
        post_type.value,
    )
    return post


async def list_posts(
    *,
    post_type: str | None = None,
    category_id: int | None = None,
    author: str | None = None,
) -> list[dict[str, Any]]:
    parsed_type = PostType.parse(post_type)
    return await repository.list_posts(
        post_type=parsed_type.value if parsed_type else None,
        category_id=category_id,
        author=(author or "").strip() or None,
    )


async def list_my_posts(user: CurrentUser) -> list[dict[str, Any]]:
    return await repository.list_posts_by_author(user.id)


async def _destroy_image_best_effort(public_id: str, *, post_id: int | None) -> None:
    # Callers proceed even when the hosted image lingers.
    try:
        await media.destroy_image(public_id)
    except media.MediaStoreError:
        logger.warning("image_destroy_failed post_id=%s public_id=%s", post_id, public_id, exc_info=True)


async def delete_post(user: CurrentUser, post_id: int) -> None:
    post = await repository.get_owned_post(post_id, author_id=user.id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found or access denied")

    public_id = post.get("image_public_id")
    if public_id:
        await _destroy_image_best_effort(str(public_id), post_id=post_id)

    await repository.delete_post(post_id)
    logger.info("post_deleted post_id=%s author_id=%s", post_id, user.id)


async def require_post(post_id: int) -> None:
    if not await repository.post_exists(post_id):
        raise HTTPException(status_code=404, detail="Post not found")


async def record_view(post_id: int) -> bool:
    """
    Bump a post's view counter. A store failure is logged, never raised.

    Unknown post ids are a silent no-op.
    """
    try:
        updated = await repository.increment_view_count(post_id)
    except db.StoreUnavailableError:
        logger.warning("view_count_failed post_id=%s", post_id, exc_info=True)
        return False
    if not updated:
        logger.debug("view_count_noop post_id=%s", post_id)
    return True
