"""Common utilities for hmacsign."""

from hmacsign.common.hmac import build_message, body_digest, includes_body, sign, verify
from hmacsign.common.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "build_message",
    "body_digest",
    "includes_body",
    "sign",
    "verify",
]
