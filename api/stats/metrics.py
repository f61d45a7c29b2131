"""
Engagement metrics.

Pure calculation: no database I/O. Every function here is a deterministic
function of the raw counts it receives, so one snapshot yields one answer.

The student "weekly" figures are fixed heuristics over lifetime counts, not
time-windowed tracking.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

TOTAL_CATEGORIES = 6
DEFAULT_TOP_CATEGORY = "Exploring"

# (inclusive lower bound, level), checked highest first.
ENGAGEMENT_LEVELS: tuple[tuple[int, str], ...] = (
    (50, "Expert"),
    (25, "Active"),
    (10, "Regular"),
    (0, "Beginner"),
)


def round_half_up(numerator: int, denominator: int, *, scale: int = 100) -> int:
    """
    round(numerator / denominator * scale) with halves rounded up, in exact integer math.

    Inputs are non-negative counts. A zero denominator yields 0.
    """
    if denominator <= 0:
        return 0
    return (2 * numerator * scale + denominator) // (2 * denominator)


@dataclass(frozen=True)
class EngagementSnapshot:
    """Raw per-user ledger counts read once at the start of a request."""

    liked_posts: int = 0
    saved_posts: int = 0
    comments_made: int = 0

    @property
    def total_engagement(self) -> int:
        return self.liked_posts + self.saved_posts + self.comments_made

    @property
    def weighted_engagement(self) -> int:
        # Comments count double toward the engagement level.
        return self.liked_posts + self.saved_posts + self.comments_made * 2


@dataclass(frozen=True)
class TeacherCounts:
    total_posts: int = 0
    blog_posts: int = 0
    social_posts: int = 0
    total_views: int = 0
    total_likes: int = 0


@dataclass(frozen=True)
class TeacherStats:
    totalPosts: int
    blogPosts: int
    socialPosts: int
    totalViews: int
    totalLikes: int
    engagementRate: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class StudentStats:
    readPosts: int
    likedPosts: int
    savedPosts: int
    commentsMade: int
    learningStreak: int
    topCategory: str
    weeklyActivity: int
    likesThisWeek: int
    savesThisWeek: int
    commentsThisWeek: int
    categoriesExplored: int
    totalCategories: int
    explorationProgress: int
    engagementLevel: str

    def to_dict(self) -> dict[str, int | str]:
        return asdict(self)


def engagement_rate(total_likes: int, total_posts: int) -> int:
    return round_half_up(total_likes, total_posts)


def engagement_level(snapshot: EngagementSnapshot) -> str:
    score = snapshot.weighted_engagement
    for lower_bound, level in ENGAGEMENT_LEVELS:
        if score >= lower_bound:
            return level
    return ENGAGEMENT_LEVELS[-1][1]


def learning_streak(snapshot: EngagementSnapshot) -> int:
    return min(7, (snapshot.liked_posts + snapshot.saved_posts) // 3 + 1)


def categories_explored(snapshot: EngagementSnapshot) -> int:
    return min(TOTAL_CATEGORIES, snapshot.liked_posts // 2 + 1)


def teacher_stats(counts: TeacherCounts) -> TeacherStats:
    return TeacherStats(
        totalPosts=counts.total_posts,
        blogPosts=counts.blog_posts,
        socialPosts=counts.social_posts,
        totalViews=counts.total_views,
        totalLikes=counts.total_likes,
        engagementRate=engagement_rate(counts.total_likes, counts.total_posts),
    )


def student_stats(snapshot: EngagementSnapshot) -> StudentStats:
    likes = snapshot.liked_posts
    saves = snapshot.saved_posts
    comments = snapshot.comments_made
    explored = categories_explored(snapshot)

    return StudentStats(
        readPosts=likes,  # likes stand in for reads; views are not tracked per user
        likedPosts=likes,
        savedPosts=saves,
        commentsMade=comments,
        learningStreak=learning_streak(snapshot),
        topCategory=DEFAULT_TOP_CATEGORY,
        weeklyActivity=min(20, likes + saves),
        likesThisWeek=min(10, likes // 2),
        savesThisWeek=min(5, saves // 2),
        commentsThisWeek=min(3, comments),
        categoriesExplored=explored,
        totalCategories=TOTAL_CATEGORIES,
        explorationProgress=round_half_up(explored, TOTAL_CATEGORIES),
        engagementLevel=engagement_level(snapshot),
    )
