"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from core import db

from . import dependencies, schemas, service

router = APIRouter(prefix="/auth")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: schemas.RegisterRequest,
    store: db.Store = Depends(db.get_store),
) -> schemas.AuthResponse:
    return await service.register(store, request)


@router.post("/login")
async def login(
    request: schemas.LoginRequest,
    store: db.Store = Depends(db.get_store),
) -> schemas.AuthResponse:
    return await service.login(store, request)


@router.post("/refresh")
async def refresh(
    current_user: dict = Depends(dependencies.get_current_user),
) -> schemas.TokenResponse:
    return service.refresh(current_user)


@router.post("/send-reset-code")
async def send_reset_code(
    request: schemas.SendResetCodeRequest,
    store: db.Store = Depends(db.get_store),
) -> dict:
    return await service.send_reset_code(store, request)


@router.post("/verify-reset-code")
async def verify_reset_code(
    request: schemas.VerifyResetCodeRequest,
    store: db.Store = Depends(db.get_store),
) -> schemas.VerifyResetCodeResponse:
    return await service.verify_reset_code(store, request)


@router.post("/forgot-password")
async def forgot_password(
    request: schemas.ResetPasswordRequest,
    store: db.Store = Depends(db.get_store),
) -> dict:
    return await service.reset_password(store, request)
