"""
Statistics reads (raw SQL, read-only).
"""

from __future__ import annotations

from typing import Any

from core import db


async def count_likes_by_user(user_id: int) -> int:
    value = await db.fetch_value("SELECT count(*) FROM likes WHERE user_id = $1", user_id)
    return int(value or 0)


async def count_saves_by_user(user_id: int) -> int:
    value = await db.fetch_value("SELECT count(*) FROM saved_posts WHERE user_id = $1", user_id)
    return int(value or 0)


async def count_comments_by_user(user_id: int) -> int:
    value = await db.fetch_value("SELECT count(*) FROM comments WHERE user_id = $1", user_id)
    return int(value or 0)


async def author_post_totals(author_id: int) -> dict[str, Any]:
    """
    Post counts (overall and by type), summed views, and likes received on the author's posts.
    """
    row = await db.fetch_one(
        """
        SELECT
          count(*) AS total_posts,
          count(*) FILTER (WHERE p.post_type = 'blog') AS blog_posts,
          count(*) FILTER (WHERE p.post_type = 'social') AS social_posts,
          COALESCE(sum(p.view_count), 0) AS total_views,
          (
            SELECT count(*)
            FROM likes l
            JOIN posts lp ON lp.id = l.post_id
            WHERE lp.author_id = $1
          ) AS total_likes
        FROM posts p
        WHERE p.author_id = $1
        """,
        author_id,
    )
    return row or {}
