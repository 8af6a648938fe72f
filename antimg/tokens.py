"""Signed session and API tokens."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import jwt

WEB_TOKEN_LIFETIME = 7 * 24 * 3600

_ALGORITHMS = ["HS256", "HS384", "HS512"]
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
}

_INVALID = "无效的token"
_MALFORMED = "token格式错误"
_STALE_API_TOKEN = "API Token已失效，请使用最新的Token"


class TokenError(Exception):
    """Raised when a token is rejected."""


@dataclass(frozen=True)
class Claims:
    """User details carried by a token."""

    username: str
    role: str
    issued_at: int | None = None
    expires_at: int | None = None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sign(payload: dict[str, Any], secret: str) -> str:
    return jwt.encode(payload, secret, algorithm="HS256")


def generate_web_token(
    username: str, role: str, secret: str, now: float | None = None
) -> str:
    """Create a session token valid for seven days."""
    issued = int(time.time() if now is None else now)
    return _sign(
        {
            "username": username,
            "role": role,
            "exp": issued + WEB_TOKEN_LIFETIME,
            "iat": issued,
        },
        secret,
    )


def generate_api_token(
    username: str, role: str, secret: str, now: float | None = None
) -> str:
    """Create an API token with no expiry."""
    issued = int(time.time() if now is None else now)
    return _sign({"username": username, "role": role, "iat": issued}, secret)


def _verified_payload(token: str, secret: str, now: float) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token, secret, algorithms=_ALGORITHMS, options=_DECODE_OPTIONS
        )
    except jwt.InvalidTokenError as exc:
        raise TokenError(_INVALID) from exc
    for claim in ("exp", "nbf", "iat"):
        if claim in payload and not _is_number(payload[claim]):
            raise TokenError(_INVALID)
    if "exp" in payload and now >= payload["exp"]:
        raise TokenError(_INVALID)
    if "nbf" in payload and now < payload["nbf"]:
        raise TokenError(_INVALID)
    return payload


def _claims(payload: dict[str, Any], username: str, role: str) -> Claims:
    iat = payload.get("iat")
    exp = payload.get("exp")
    return Claims(
        username=username,
        role=role,
        issued_at=int(iat) if iat is not None else None,
        expires_at=int(exp) if exp is not None else None,
    )


def decode_claims(token: str, secret: str) -> Claims:
    """Verify a token and return its claims; absent user fields become empty."""
    payload = _verified_payload(token, secret, time.time())
    username = payload.get("username") or ""
    role = payload.get("role") or ""
    if not isinstance(username, str) or not isinstance(role, str):
        raise TokenError(_INVALID)
    return _claims(payload, username, role)


def classify_token(
    token: str,
    secret: str,
    current_api_token: str | None,
    now: float | None = None,
) -> tuple[Claims, str]:
    """Verify a bearer token and tell whether it is the current API token or a session token.

    Returns the claims and ``"api_token"`` or ``"web_token"``.
    """
    payload = _verified_payload(token, secret, time.time() if now is None else now)
    username = payload.get("username")
    role = payload.get("role")
    if not isinstance(username, str) or not isinstance(role, str):
        raise TokenError(_MALFORMED)
    claims = _claims(payload, username, role)
    if token == current_api_token:
        return claims, "api_token"
    if "exp" in payload:
        return claims, "web_token"
    raise TokenError(_STALE_API_TOKEN)