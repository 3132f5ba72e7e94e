"""Value types for a signing call."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

# Parameter names as reported back to the caller.
KEY = "Key"
SECRET = "Secret"
METHOD = "Method"
PAYLOAD = "Payload"
TIMESTAMP = "TimeStamp"
SIGNATURE = "Signature"


@dataclass(frozen=True)
class SigningRequest:
    """Inputs of one signing call."""

    key: str | None
    secret: str | None
    method: str | None
    payload: str | None
    timestamp: int | None = None

    def echo(self, timestamp: int | None = None) -> dict[str, Any]:
        """Inputs keyed by parameter name, with the resolved timestamp if known."""
        return {
            KEY: self.key,
            SECRET: self.secret,
            METHOD: self.method,
            PAYLOAD: self.payload,
            TIMESTAMP: timestamp if timestamp is not None else self.timestamp,
        }


@dataclass(frozen=True)
class SigningResult:
    """A successfully produced signature and the inputs it was made from."""

    signature: str
    key: str
    secret: str
    method: str
    payload: str
    timestamp: int

    def as_dict(self, include_secret: bool = True) -> dict[str, Any]:
        data = asdict(self)
        if not include_secret:
            data["secret"] = "***"
        return data

    def summary(self) -> str:
        return (
            f"HMAC: {self.signature}\n\n"
            f"Values:\n"
            f"Key: {self.key}\n"
            f"Secret: {self.secret}\n"
            f"Method: {self.method}\n"
            f"Payload:\n{self.payload}\n"
            f"TimeStamp: {self.timestamp}"
        )


class OutcomeStatus(str, Enum):
    """How a signing call ended."""

    PASSED = "passed"
    INVALID = "invalid"
    FAILED = "failed"


@dataclass(frozen=True)
class SigningOutcome:
    """Reportable outcome of a signing call; never raises to the caller."""

    status: OutcomeStatus
    message: str
    inputs: dict[str, Any] = field(default_factory=dict)
    details: str = ""
    signature: str | None = None
    field_name: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.PASSED
