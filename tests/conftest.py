"""Pytest configuration and fixtures."""

import base64
import hashlib
import hmac
from typing import Any

import pytest

from hmacsign.common.settings import Settings
from hmacsign.signer.generator import SignatureGenerator
from hmacsign.signer.models import SigningRequest


def reference_signature(key: str, secret: str, method: str, payload: str, timestamp: int) -> str:
    """Independent two-stage digest-then-HMAC computation."""
    canonical = f"{key}:{timestamp}"
    if method.upper() not in ("GET", "DELETE"):
        digest = hashlib.sha256(payload.encode("ascii")).digest()
        canonical += ":" + base64.b64encode(digest).decode("ascii")
    mac = hmac.new(secret.encode("ascii"), canonical.encode("ascii"), hashlib.sha256)
    return base64.b64encode(mac.digest()).decode("ascii")


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        text_encoding="ascii",
        encoding_errors="strict",
        allow_empty_payload=False,
        log_level="DEBUG",
    )


@pytest.fixture
def generator(settings: Settings) -> SignatureGenerator:
    """Signature generator bound to test settings."""
    return SignatureGenerator(settings)


@pytest.fixture
def sample_inputs() -> dict[str, Any]:
    """Inputs of the documented POST scenario."""
    return {
        "key": "abc123",
        "secret": "s3cr3t",
        "method": "POST",
        "payload": '{"a":1}',
        "timestamp": 1000,
    }


@pytest.fixture
def sample_request(sample_inputs: dict[str, Any]) -> SigningRequest:
    """SigningRequest for the documented POST scenario."""
    return SigningRequest(**sample_inputs)
