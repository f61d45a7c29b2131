"""
Interaction ledger persistence (likes, saves, comments).
"""

from __future__ import annotations

from typing import Any

from core import db

from .schemas import FactKind


async def toggle_fact(kind: FactKind, *, user_id: int, post_id: int) -> bool:
    """
    Flip presence of a (user, post) fact and return whether it is now present.

    Delete-first keeps the toggle to at most two statements in one transaction.
    The UNIQUE (user_id, post_id) constraint absorbs a concurrent insert, in
    which case the fact is present and the answer is still True.
    """
    table = kind.table
    async with db.transaction() as conn:
        removed = await conn.fetchrow(
            f"DELETE FROM {table} WHERE user_id = $1 AND post_id = $2 RETURNING id",
            user_id,
            post_id,
        )
        if removed is not None:
            return False

        await conn.execute(
            f"""
            INSERT INTO {table} (user_id, post_id)
            VALUES ($1, $2)
            ON CONFLICT (user_id, post_id) DO NOTHING
            """,
            user_id,
            post_id,
        )
        return True


async def fact_exists(kind: FactKind, *, user_id: int, post_id: int) -> bool:
    row = await db.fetch_one(
        f"SELECT 1 AS ok FROM {kind.table} WHERE user_id = $1 AND post_id = $2 LIMIT 1",
        user_id,
        post_id,
    )
    return row is not None


async def count_facts_for_post(kind: FactKind, post_id: int) -> int:
    value = await db.fetch_value(f"SELECT count(*) FROM {kind.table} WHERE post_id = $1", post_id)
    return int(value or 0)


async def insert_comment(*, user_id: int, post_id: int, content: str) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        WITH inserted AS (
            INSERT INTO comments (user_id, post_id, content)
            VALUES ($1, $2, $3)
            RETURNING id, post_id, user_id, content, created_at
        )
        SELECT i.id, i.post_id, i.user_id, u.username AS author_name, i.content, i.created_at
        FROM inserted i
        LEFT JOIN users u ON u.id = i.user_id
        """,
        user_id,
        post_id,
        content,
    )
    if row is None:
        raise RuntimeError("Failed to insert comment.")
    return row


async def list_comments(post_id: int, *, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT c.id, c.post_id, c.user_id, u.username AS author_name, c.content, c.created_at
        FROM comments c
        LEFT JOIN users u ON u.id = c.user_id
        WHERE c.post_id = $1
        ORDER BY c.created_at ASC, c.id ASC
        LIMIT $2
        OFFSET $3
        """,
        post_id,
        limit,
        offset,
    )
