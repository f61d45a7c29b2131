"""
Category listing endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter

from core import db

router = APIRouter()


@router.get("/categories")
async def list_categories() -> dict:
    categories = await db.fetch_all("SELECT id, name FROM categories ORDER BY name")
    return {"success": True, "categories": categories}
