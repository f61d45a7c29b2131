"""
Achievement evaluation for one user.
"""

from __future__ import annotations

from stats import service as stats_service

from . import catalog


async def evaluate_for_user(user_id: int) -> catalog.AchievementReport:
    snapshot = await stats_service.read_snapshot(user_id)
    return catalog.evaluate(snapshot)
