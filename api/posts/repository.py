"""
Post catalog persistence.
This module is where post-related SQL lives.
"""

from __future__ import annotations

from typing import Any

from core import db

_POST_COLUMNS = """
    p.id, p.title, p.content, p.category_id, p.author_id, p.image_url,
    p.image_public_id, p.post_type, p.view_count, p.created_at,
    u.username AS author_name, c.name AS category_name
"""


async def insert_post(
    *,
    title: str,
    content: str,
    category_id: int | None,
    author_id: int,
    image_url: str | None,
    image_public_id: str | None,
    post_type: str,
) -> dict[str, Any]:
    """
    Insert a post and return it joined with author/category names.
    """
    async with db.transaction() as conn:
        post_id = await conn.fetchval(
            """
            INSERT INTO posts (title, content, category_id, author_id, image_url, image_public_id, post_type)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING id
            """,
            title,
            content,
            category_id,
            author_id,
            image_url,
            image_public_id,
            post_type,
        )
        if post_id is None:
            raise RuntimeError("Failed to insert post.")

        row = await conn.fetchrow(
            f"""
            SELECT {_POST_COLUMNS}
            FROM posts p
            LEFT JOIN users u ON p.author_id = u.id
            LEFT JOIN categories c ON p.category_id = c.id
            WHERE p.id = $1
            """,
            post_id,
        )
        return dict(row)


async def list_posts(
    *,
    post_type: str | None = None,
    category_id: int | None = None,
    author: str | None = None,
) -> list[dict[str, Any]]:
    """
    List posts newest first. Each filter is skipped when None.
    """
    return await db.fetch_all(
        f"""
        SELECT {_POST_COLUMNS}
        FROM posts p
        LEFT JOIN users u ON p.author_id = u.id
        LEFT JOIN categories c ON p.category_id = c.id
        WHERE ($1::text IS NULL OR p.post_type = $1)
          AND ($2::bigint IS NULL OR p.category_id = $2)
          AND ($3::text IS NULL OR u.username = $3)
        ORDER BY p.created_at DESC, p.id DESC
        """,
        post_type,
        category_id,
        author,
    )


async def list_posts_by_author(author_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {_POST_COLUMNS}
        FROM posts p
        LEFT JOIN users u ON p.author_id = u.id
        LEFT JOIN categories c ON p.category_id = c.id
        WHERE p.author_id = $1
        ORDER BY p.created_at DESC, p.id DESC
        """,
        author_id,
    )


async def get_owned_post(post_id: int, *, author_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT id, author_id, image_public_id
        FROM posts
        WHERE id = $1
          AND author_id = $2
        """,
        post_id,
        author_id,
    )


async def post_exists(post_id: int) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM posts
        WHERE id = $1
        LIMIT 1
        """,
        post_id,
    )
    return row is not None


async def delete_post(post_id: int) -> bool:
    # likes, saved_posts and comments go with it (ON DELETE CASCADE).
    status_tag = await db.execute("DELETE FROM posts WHERE id = $1", post_id)
    return db.affected_rows(status_tag) > 0


async def increment_view_count(post_id: int) -> bool:
    status_tag = await db.execute(
        """
        UPDATE posts
        SET view_count = COALESCE(view_count, 0) + 1
        WHERE id = $1
        """,
        post_id,
    )
    return db.affected_rows(status_tag) > 0
