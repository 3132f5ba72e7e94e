"""HMAC signing utilities for outbound request authentication."""

from __future__ import annotations

import base64
import hashlib
import hmac

# Methods whose body never takes part in the signed material.
BODY_EXEMPT_METHODS = frozenset({"GET", "DELETE"})

DEFAULT_ENCODING = "ascii"


def includes_body(method: str) -> bool:
    """Return True when the body digest is part of the canonical message."""
    return method.upper() not in BODY_EXEMPT_METHODS


def body_digest(
    payload: str,
    encoding: str = DEFAULT_ENCODING,
    errors: str = "strict",
) -> str:
    """Base64 encoded SHA-256 of the payload bytes."""
    digest = hashlib.sha256(payload.encode(encoding, errors)).digest()
    return base64.b64encode(digest).decode("ascii")


def build_message(
    key: str,
    timestamp: int | str,
    method: str,
    payload: str,
    encoding: str = DEFAULT_ENCODING,
    errors: str = "strict",
) -> bytes:
    """
    Build the canonical message for a request.

    ``key:timestamp`` for GET and DELETE, ``key:timestamp:bodyDigest`` for
    every other method. The payload of a GET or DELETE is ignored even when
    it is non-empty.
    """
    raw = f"{key}:{timestamp}"
    if includes_body(method):
        raw = f"{raw}:{body_digest(payload, encoding, errors)}"
    return raw.encode(encoding, errors)


def sign(
    secret: str,
    message: bytes,
    encoding: str = DEFAULT_ENCODING,
    errors: str = "strict",
) -> str:
    """Create a base64-encoded HMAC-SHA256 signature."""
    mac = hmac.new(secret.encode(encoding, errors), message, hashlib.sha256)
    return base64.b64encode(mac.digest()).decode("ascii")


def verify(
    secret: str,
    message: bytes,
    signature: str,
    encoding: str = DEFAULT_ENCODING,
    errors: str = "strict",
) -> bool:
    """Verify HMAC signature in constant time."""
    expected = sign(secret, message, encoding, errors)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
