"""
Password hashing and bearer tokens.

Passwords: salted PBKDF2-HMAC-SHA512.
  Stored as  pbkdf2_sha512$<iterations>$<salt_hex>$<hash_hex>
  Older rows stored as  <salt_hex>:<hash_hex>  (1000 iterations, 64-byte key)
  still verify.

Tokens: <base64url(payload json)>.<base64url(hmac-sha256 signature)>
  payload = {"sub", "org", "email", "role", "iat", "exp"}
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

PBKDF2_ALGORITHM = "sha512"
PBKDF2_ITERATIONS = 210_000
PBKDF2_KEY_LENGTH = 64
LEGACY_ITERATIONS = 1000
HASH_PREFIX = "pbkdf2_sha512"


class TokenError(Exception):
    """Token is malformed, tampered with or expired."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    organization_id: str
    email: str
    role: str
    issued_at: int
    expires_at: int


# -------------------------------------------------------------
#  Passwords
# -------------------------------------------------------------
def _pbkdf2(password: str, salt: str, iterations: int) -> str:
    return hashlib.pbkdf2_hmac(
        PBKDF2_ALGORITHM,
        password.encode("utf-8"),
        salt.encode("utf-8"),
        iterations,
        PBKDF2_KEY_LENGTH,
    ).hex()


def hash_password(password: str, *, iterations: int = PBKDF2_ITERATIONS) -> str:
    salt = secrets.token_hex(16)
    digest = _pbkdf2(password, salt, iterations)
    return f"{HASH_PREFIX}${iterations}${salt}${digest}"


def verify_password(password: str, stored_hash: Optional[str]) -> bool:
    if not stored_hash:
        return False

    if stored_hash.startswith(HASH_PREFIX + "$"):
        try:
            _, iterations_s, salt, expected = stored_hash.split("$", 3)
            iterations = int(iterations_s)
        except ValueError:
            return False
    elif ":" in stored_hash:
        salt, expected = stored_hash.split(":", 1)
        iterations = LEGACY_ITERATIONS
    else:
        return False

    actual = _pbkdf2(password, salt, iterations)
    return hmac.compare_digest(actual, expected)


# -------------------------------------------------------------
#  Tokens
# -------------------------------------------------------------
def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _sign(body: str, secret: str) -> str:
    mac = hmac.new(secret.encode("utf-8"), body.encode("ascii"), hashlib.sha256)
    return _b64encode(mac.digest())


def issue_token(
    *,
    user_id: Any,
    organization_id: Any,
    email: str,
    role: str,
    secret: str,
    ttl_seconds: int,
    now: Optional[float] = None,
) -> str:
    issued = int(now if now is not None else time.time())
    payload = {
        "sub": str(user_id),
        "org": str(organization_id),
        "email": email,
        "role": role,
        "iat": issued,
        "exp": issued + int(ttl_seconds),
    }
    body = _b64encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
    return f"{body}.{_sign(body, secret)}"


def verify_token(token: str, *, secret: str, now: Optional[float] = None) -> TokenClaims:
    """
    Checks signature and expiry and returns the claims.
    Raises TokenError on anything that is not a valid, live token.
    """
    if not token or token.count(".") != 1:
        raise TokenError("Malformed token")

    body, signature = token.split(".", 1)
    if not hmac.compare_digest(_sign(body, secret), signature):
        raise TokenError("Invalid token signature")

    try:
        payload: Dict[str, Any] = json.loads(_b64decode(body))
    except (ValueError, UnicodeDecodeError) as e:
        raise TokenError("Malformed token payload") from e

    try:
        claims = TokenClaims(
            user_id=str(payload["sub"]),
            organization_id=str(payload["org"]),
            email=str(payload.get("email") or ""),
            role=str(payload.get("role") or "user"),
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise TokenError("Token payload is missing claims") from e

    current = int(now if now is not None else time.time())
    if claims.expires_at <= current:
        raise TokenError("Token has expired")

    return claims
