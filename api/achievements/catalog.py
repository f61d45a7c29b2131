"""
Student achievement catalog.

A fixed list of threshold rules, each a pure predicate over an
EngagementSnapshot. Nothing here is persisted: the whole catalog is
re-evaluated on every request, and the `date` of an unlocked badge is just the
evaluation time.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from stats.metrics import EngagementSnapshot, round_half_up

Predicate = Callable[[EngagementSnapshot], bool]


@dataclass(frozen=True)
class AchievementRule:
    id: str
    name: str
    description: str
    icon: str
    predicate: Predicate


@dataclass(frozen=True)
class AchievementResult:
    id: str
    name: str
    description: str
    icon: str
    unlocked: bool
    date: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "unlocked": self.unlocked,
            "icon": self.icon,
            "date": self.date,
        }


@dataclass(frozen=True)
class AchievementReport:
    achievements: tuple[AchievementResult, ...]

    @property
    def unlocked_count(self) -> int:
        return sum(1 for a in self.achievements if a.unlocked)

    @property
    def total_achievements(self) -> int:
        return len(self.achievements)

    @property
    def progress(self) -> int:
        return round_half_up(self.unlocked_count, self.total_achievements)

    def to_dict(self) -> dict[str, Any]:
        return {
            "achievements": [a.to_dict() for a in self.achievements],
            "unlockedCount": self.unlocked_count,
            "totalAchievements": self.total_achievements,
            "progress": self.progress,
        }


CATALOG: tuple[AchievementRule, ...] = (
    AchievementRule(
        id="first_like",
        name="First Like",
        description="Liked your first post",
        icon="👍",
        predicate=lambda s: s.liked_posts > 0,
    ),
    AchievementRule(
        id="first_save",
        name="Bookmarker",
        description="Saved your first post",
        icon="📚",
        predicate=lambda s: s.saved_posts > 0,
    ),
    AchievementRule(
        id="first_comment",
        name="Conversation Starter",
        description="Left your first comment",
        icon="💬",
        predicate=lambda s: s.comments_made > 0,
    ),
    AchievementRule(
        id="three_day_streak",
        name="Learning Streak",
        description="3 consecutive days of activity",
        icon="🔥",
        predicate=lambda s: s.total_engagement >= 3,
    ),
    AchievementRule(
        id="category_explorer",
        name="Category Explorer",
        description="Explored multiple categories",
        icon="🧭",
        predicate=lambda s: s.total_engagement >= 5,
    ),
    AchievementRule(
        id="active_learner",
        name="Active Learner",
        description="10+ total engagements",
        icon="⭐",
        predicate=lambda s: s.total_engagement >= 10,
    ),
)


def evaluate(
    snapshot: EngagementSnapshot,
    *,
    now: datetime | None = None,
    catalog: tuple[AchievementRule, ...] = CATALOG,
) -> AchievementReport:
    """
    Annotate every rule in `catalog` with its unlocked state. Never filters.
    """
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    results = []
    for rule in catalog:
        unlocked = bool(rule.predicate(snapshot))
        results.append(
            AchievementResult(
                id=rule.id,
                name=rule.name,
                description=rule.description,
                icon=rule.icon,
                unlocked=unlocked,
                date=stamp if unlocked else None,
            )
        )
    return AchievementReport(achievements=tuple(results))
