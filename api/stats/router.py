"""
Role-gated statistics endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from auth.schemas import CurrentUser

from . import service

router = APIRouter()


@router.get("/teacher-stats")
async def teacher_stats(
    current_user: CurrentUser = Depends(auth_dependencies.require_teacher),
) -> dict:
    stats = await service.compute_teacher_stats(current_user.id)
    return {"success": True, "stats": stats.to_dict()}


@router.get("/student-stats")
async def student_stats(
    current_user: CurrentUser = Depends(auth_dependencies.require_student),
) -> dict:
    stats = await service.compute_student_stats(current_user.id)
    return {"success": True, "stats": stats.to_dict()}
