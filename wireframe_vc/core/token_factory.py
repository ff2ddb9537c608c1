"""Pure functions for creating and decoding HS256 service tokens.

Used by the auth dependency and by tooling that mints tokens for the editor
backend. Only tokens issued by this service (``iss == TOKEN_ISSUER``) are
accepted.
"""

import hashlib
import hmac
import base64
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

TOKEN_ISSUER = "wireframe-vc"

ROLES = ("admin", "editor", "viewer", "service")


@dataclass(frozen=True)
class TokenPayload:
    """Decoded token payload. Immutable."""
    sub: str
    role: str
    exp: datetime


def create_token(
    subject: str,
    role: str,
    secret: str,
    algorithm: str = "HS256",
    expires_hours: int = 24,
) -> str:
    """Create a signed token.

    Args:
        subject: User id recorded as ``created_by`` on versions.
        role: One of ``ROLES``.
        secret: HMAC signing key.
        algorithm: Only HS256 supported.
        expires_hours: Hours until expiry.
    """
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")

    now = time.time()
    payload = {
        "sub": subject,
        "role": role,
        "iat": int(now),
        "exp": int(now + expires_hours * 3600),
        "iss": TOKEN_ISSUER,
    }

    header = {"alg": "HS256", "typ": "JWT"}
    segments = [
        _b64encode(json.dumps(header).encode()),
        _b64encode(json.dumps(payload).encode()),
    ]
    signing_input = b".".join(segments)
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    segments.append(_b64encode(signature))
    return b".".join(segments).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """Decode and validate a token.

    Returns ``None`` on any validation failure (bad signature, expired,
    foreign issuer, unknown role, malformed) rather than raising.
    """
    if algorithm != "HS256":
        return None

    try:
        parts = token.encode().split(b".")
        if len(parts) != 3:
            return None

        signing_input = parts[0] + b"." + parts[1]
        expected_sig = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
        actual_sig = _b64decode(parts[2])

        if not hmac.compare_digest(expected_sig, actual_sig):
            return None

        payload = json.loads(_b64decode(parts[1]))

        if payload.get("iss") != TOKEN_ISSUER:
            return None

        exp = payload.get("exp", 0)
        if time.time() > exp:
            return None

        role = payload.get("role", "")
        subject = payload.get("sub", "")
        if role not in ROLES or not subject:
            return None

        return TokenPayload(
            sub=subject,
            role=role,
            exp=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
    except (json.JSONDecodeError, KeyError, ValueError, IndexError, TypeError):
        return None


# --- base64url helpers (no padding, URL-safe) ---

def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    padding = 4 - len(data) % 4
    if padding != 4:
        data += b"=" * padding
    return base64.urlsafe_b64decode(data)
