"""
Auth business logic.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status

from core import db, sms
from users import repository as user_repository

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        name=str(user_row["name"]),
        age=user_row.get("age"),
        mac=user_row.get("mac"),
        phone_number=str(user_row["phone_number"]),
        image=user_row.get("image"),
        created_at=user_row.get("created_at"),
    )


async def register(store: db.Store, payload: schemas.RegisterRequest) -> schemas.AuthResponse:
    name = payload.name.strip()
    existing = await user_repository.get_user_by_name(store, name)
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists.",
        )

    try:
        user_row = await user_repository.create_user(
            store,
            name=name,
            password_hash=security.hash_password(payload.password),
            phone_number=payload.phone_number.strip(),
            age=payload.age,
            mac=payload.mac,
            image=payload.image,
        )
    except db.UniqueViolation as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists.",
        ) from exc

    logger.info("user_registered id=%s", user_row["id"])
    token = security.build_access_token(user_id=int(user_row["id"]))
    return schemas.AuthResponse(user=to_user_response(user_row), token=token)


async def login(store: db.Store, payload: schemas.LoginRequest) -> schemas.AuthResponse:
    user_row = await user_repository.get_user_by_name(store, payload.name)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials.",
        )

    is_valid = security.verify_password(payload.password, str(user_row.get("password_hash") or ""))
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials.",
        )

    token = security.build_access_token(user_id=int(user_row["id"]))
    return schemas.AuthResponse(user=to_user_response(user_row), token=token)


def refresh(user_row: dict) -> schemas.TokenResponse:
    return schemas.TokenResponse(token=security.build_access_token(user_id=int(user_row["id"])))


async def send_reset_code(store: db.Store, payload: schemas.SendResetCodeRequest) -> dict[str, bool]:
    phone_number = payload.phone_number.strip()
    user_row = await user_repository.get_user_by_phone(store, phone_number)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User with this phone number does not exist.",
        )

    code = security.build_reset_code()
    expires_at = _utc_now() + timedelta(minutes=security.reset_code_expire_minutes())
    try:
        await sms.send_sms(to=phone_number, message=f"Your password reset code is {code}")
    except sms.SmsError as exc:
        logger.exception("reset_code_delivery_failed user_id=%s", user_row["id"])
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not deliver the reset code.",
        ) from exc

    # Only delivered codes are stored.
    await repository.insert_reset_code(store, phone_number=phone_number, code=code, expires_at=expires_at)

    return {"sent": True}


async def verify_reset_code(
    store: db.Store,
    payload: schemas.VerifyResetCodeRequest,
) -> schemas.VerifyResetCodeResponse:
    phone_number = payload.phone_number.strip()
    now = _utc_now()

    async with store.transaction() as conn:
        codes = await repository.list_reset_codes(conn, phone_number)
        matched = any(
            row["expires_at"] > now and security.codes_match(str(row["code"]), payload.code)
            for row in codes
        )
        if not matched:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired code.",
            )
        # Consumed on first successful verification.
        await repository.delete_reset_codes(conn, phone_number)

    user_row = await user_repository.get_user_by_phone(store, phone_number)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User with this phone number does not exist.",
        )

    reset_token = security.build_reset_token(user_id=int(user_row["id"]))
    return schemas.VerifyResetCodeResponse(reset_token=reset_token)


async def reset_password(store: db.Store, payload: schemas.ResetPasswordRequest) -> dict[str, bool]:
    try:
        token_payload = security.decode_token(payload.reset_token, token_type=security.RESET_TOKEN)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    user_id = security.token_user_id(token_payload)
    updated = await user_repository.set_password_hash(store, user_id, security.hash_password(payload.new_password))
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found.",
        )

    logger.info("password_reset user_id=%s", user_id)
    return {"ok": True}


async def get_user_from_access_token(store: db.Store, access_token: str) -> dict:
    try:
        payload = security.decode_token(access_token)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    user_row = await user_repository.get_user_by_id(store, security.token_user_id(payload))
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found.",
        )
    return user_row
