"""
SMS gateway HTTP client.

Used endpoint:
- POST {SMS_GATEWAY_URL}  json={"to": "+15550100", "message": "..."}

When SMS_GATEWAY_URL is not configured (local development) the message is
written to the log instead of being sent.
"""

from __future__ import annotations

import logging

import httpx

from . import config

logger = logging.getLogger(__name__)


# Gateway failures are explicit and separable from other runtime errors.
class SmsError(RuntimeError):
    pass


def gateway_url() -> str:
    return config.env_str("SMS_GATEWAY_URL").rstrip("/")


def gateway_token() -> str:
    return config.env_str("SMS_GATEWAY_TOKEN")


async def send_sms(*, to: str, message: str, timeout_s: float = 10.0) -> None:
    to = (to or "").strip()
    if not to:
        raise SmsError("SMS recipient is empty.")

    url = gateway_url()
    if not url:
        logger.warning("sms_gateway_unconfigured to=%s message=%r", to, message)
        return None

    headers = {}
    token = gateway_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            resp = await client.post(url, json={"to": to, "message": message}, headers=headers)
    except httpx.HTTPError as exc:
        raise SmsError(f"SMS gateway request failed: {exc}") from exc

    if resp.status_code >= 300:
        # Avoid dumping huge bodies; include a small snippet.
        body = resp.text[:500]
        raise SmsError(f"SMS gateway request failed: {resp.status_code} {body}")

    logger.info("sms_sent to=%s", to)
