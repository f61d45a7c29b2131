"""
Enums for post endpoints.
"""

from __future__ import annotations

from enum import Enum


class PostType(str, Enum):
    BLOG = "blog"
    SOCIAL = "social"

    @classmethod
    def parse(cls, raw: str | None) -> "PostType | None":
        """
        Lenient parse for query filters: unknown values mean "no filter".
        """
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return None
