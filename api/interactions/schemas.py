"""
Ledger fact kinds and comment request/response models.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class FactKind(str, Enum):
    LIKE = "like"
    SAVE = "save"

    @property
    def table(self) -> str:
        return _FACT_TABLES[self]


# Fixed table names; never built from request input.
_FACT_TABLES = {
    FactKind.LIKE: "likes",
    FactKind.SAVE: "saved_posts",
}


class CommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    user_id: int
    author_name: str | None = None
    content: str
    created_at: datetime
