"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from . import dependencies, schemas, service

router = APIRouter()


@router.post("/register", response_model=schemas.AuthResponse)
async def register(payload: schemas.RegisterRequest) -> schemas.AuthResponse:
    return await service.register(payload)


@router.post("/login", response_model=schemas.AuthResponse)
async def login(payload: schemas.LoginRequest) -> schemas.AuthResponse:
    return await service.login(payload)


@router.get("/me", response_model=schemas.MeResponse)
async def me(
    current_user: schemas.CurrentUser = Depends(dependencies.get_current_user),
) -> schemas.MeResponse:
    return schemas.MeResponse(user=current_user.to_response())
