"""
Student achievements endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from auth.schemas import CurrentUser

from . import service

router = APIRouter()


@router.get("/student-achievements")
async def student_achievements(
    current_user: CurrentUser = Depends(auth_dependencies.require_student),
) -> dict:
    report = await service.evaluate_for_user(current_user.id)
    return {"success": True, **report.to_dict()}
