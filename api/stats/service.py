"""
Statistics aggregation.

Flow:
1) Read raw counts once (the snapshot)
2) Derive every reported field from that snapshot via `metrics`

Nothing is cached; each request recounts.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from core import db

from . import metrics, repository

logger = logging.getLogger(__name__)


async def _count_or_zero(label: str, user_id: int, counter: Callable[[int], Awaitable[int]]) -> int:
    # Dashboard counts are best-effort: a failed sub-count reads as zero.
    try:
        return await counter(user_id)
    except db.StoreUnavailableError:
        logger.warning("count_degraded metric=%s user_id=%s", label, user_id, exc_info=True)
        return 0


async def read_snapshot(user_id: int) -> metrics.EngagementSnapshot:
    """
    Take the user's like/save/comment counts, each degrading independently to 0.
    """
    return metrics.EngagementSnapshot(
        liked_posts=await _count_or_zero("likes", user_id, repository.count_likes_by_user),
        saved_posts=await _count_or_zero("saves", user_id, repository.count_saves_by_user),
        comments_made=await _count_or_zero("comments", user_id, repository.count_comments_by_user),
    )


async def read_teacher_counts(user_id: int) -> metrics.TeacherCounts:
    row = await repository.author_post_totals(user_id)
    return metrics.TeacherCounts(
        total_posts=int(row.get("total_posts") or 0),
        blog_posts=int(row.get("blog_posts") or 0),
        social_posts=int(row.get("social_posts") or 0),
        total_views=int(row.get("total_views") or 0),
        total_likes=int(row.get("total_likes") or 0),
    )


async def compute_teacher_stats(user_id: int) -> metrics.TeacherStats:
    return metrics.teacher_stats(await read_teacher_counts(user_id))


async def compute_student_stats(user_id: int) -> metrics.StudentStats:
    return metrics.student_stats(await read_snapshot(user_id))
