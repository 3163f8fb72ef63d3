"""
Auth security helpers.
"""

from __future__ import annotations

import secrets
import time
from typing import Any

import bcrypt
import jwt

from core import config

ACCESS_TOKEN = "access"
RESET_TOKEN = "reset"


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return config.env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return config.env_str("JWT_ALG", "HS256")


def access_token_expire_minutes() -> int:
    return config.env_int("ACCESS_TOKEN_EXPIRE_MIN", 24 * 60)


def reset_token_expire_minutes() -> int:
    return config.env_int("RESET_TOKEN_EXPIRE_MIN", 10)


def reset_code_expire_minutes() -> int:
    return config.env_int("RESET_CODE_EXPIRE_MIN", 10)


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def _build_token(*, user_id: int, token_type: str, expire_minutes: int) -> str:
    issued_at = now_epoch_s()
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + (expire_minutes * 60),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def build_access_token(*, user_id: int) -> str:
    return _build_token(user_id=user_id, token_type=ACCESS_TOKEN, expire_minutes=access_token_expire_minutes())


def build_reset_token(*, user_id: int) -> str:
    return _build_token(user_id=user_id, token_type=RESET_TOKEN, expire_minutes=reset_token_expire_minutes())


def decode_token(token: str, *, token_type: str = ACCESS_TOKEN) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Token expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid token.") from exc

    if str(payload.get("type") or "").strip().lower() != token_type:
        raise AuthSecurityError(f"Wrong token type, expected '{token_type}'.")

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise AuthSecurityError("Invalid token subject.")

    return payload


def token_user_id(payload: dict[str, Any]) -> int:
    return int(payload["sub"])


def build_reset_code() -> str:
    # Six digits, never starting with 0.
    return str(100000 + secrets.randbelow(900000))


def codes_match(expected: str, given: str) -> bool:
    return secrets.compare_digest((expected or "").encode("utf-8"), (given or "").encode("utf-8"))
