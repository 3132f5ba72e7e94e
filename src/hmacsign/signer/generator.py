"""SignatureGenerator - canonical message construction and HMAC signing."""

from __future__ import annotations

import time

from hmacsign.common.errors import (
    InvalidParameterError,
    MissingParameterError,
    SigningError,
    SigningFailureError,
)
from hmacsign.common.hmac import build_message, includes_body, sign, verify
from hmacsign.common.logging import get_logger
from hmacsign.common.metrics import record_signing
from hmacsign.common.settings import Settings, get_settings
from hmacsign.common.tracing import span
from hmacsign.signer.clock import current_millis
from hmacsign.signer.models import (
    KEY,
    METHOD,
    PAYLOAD,
    SECRET,
    TIMESTAMP,
    OutcomeStatus,
    SigningOutcome,
    SigningRequest,
    SigningResult,
)

logger = get_logger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def validate_request(
    request: SigningRequest,
    settings: Settings,
    require_secret: bool = True,
) -> None:
    """
    Check mandatory parameters before any cryptographic work.

    Args:
        request: Request to check
        settings: Encoding and empty-payload policy
        require_secret: False when only the canonical message is needed

    Raises:
        MissingParameterError: Key, Secret, Method or Payload is None or empty
        InvalidParameterError: A text parameter is not a string, the timestamp
            is out of range, or text the configured encoding cannot represent
            (strict mode only)
    """
    echo = request.echo()
    fields = [(KEY, request.key), (SECRET, request.secret), (METHOD, request.method), (PAYLOAD, request.payload)]
    if not require_secret:
        fields = [(name, value) for name, value in fields if name != SECRET]
    for name, value in fields:
        if value is None:
            raise MissingParameterError(name, echo)
        if not isinstance(value, str):
            raise InvalidParameterError(name, "must be a string", echo)
        if not value and not (name == PAYLOAD and settings.allow_empty_payload):
            raise MissingParameterError(name, echo)

    ts = request.timestamp
    if ts is not None:
        if isinstance(ts, bool) or not isinstance(ts, int):
            raise InvalidParameterError(TIMESTAMP, "must be an integer", echo)
        if not INT64_MIN <= ts <= INT64_MAX:
            raise InvalidParameterError(TIMESTAMP, "outside the 64-bit range", echo)

    if settings.encoding_errors == "strict":
        for name, value in fields:
            if name == METHOD:
                continue
            try:
                value.encode(settings.text_encoding)  # type: ignore[union-attr]
            except UnicodeEncodeError as exc:
                raise InvalidParameterError(
                    name,
                    f"character {value[exc.start]!r} at position {exc.start} "  # type: ignore[index]
                    f"is not representable in {settings.text_encoding}",
                    echo,
                ) from exc


class SignatureGenerator:
    """
    Produces HMAC-SHA256 signatures for outbound requests.

    The generator keeps no state besides its settings, so one instance may be
    shared between threads.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def canonical_message(self, request: SigningRequest, timestamp: int) -> bytes:
        """Canonical bytes for an already validated request."""
        assert request.key is not None
        assert request.method is not None
        return build_message(
            request.key,
            timestamp,
            request.method,
            request.payload or "",
            encoding=self._settings.text_encoding,
            errors=self._settings.encoding_errors,
        )

    def generate(self, request: SigningRequest) -> SigningResult:
        """
        Sign a request.

        Args:
            request: Key, secret, method, payload and optional timestamp

        Returns:
            SigningResult with the signature and the resolved inputs

        Raises:
            MissingParameterError: A mandatory parameter is missing
            InvalidParameterError: A parameter cannot be used
            SigningFailureError: The keyed hash produced no signature
        """
        start = time.perf_counter()
        try:
            validate_request(request, self._settings)
        except SigningError:
            record_signing(request.method, "invalid")
            raise

        timestamp = request.timestamp if request.timestamp is not None else current_millis()
        echo = request.echo(timestamp)
        assert request.method is not None
        assert request.secret is not None
        body_included = includes_body(request.method)

        with span(
            "sign_request",
            {"signing.method": request.method.upper(), "signing.body_included": body_included},
        ):
            try:
                message = self.canonical_message(request, timestamp)
                signature = sign(
                    request.secret,
                    message,
                    encoding=self._settings.text_encoding,
                    errors=self._settings.encoding_errors,
                )
            except ValueError as exc:
                record_signing(request.method, "failed")
                logger.error("signing_failed", key=request.key, method=request.method, error=str(exc))
                raise SigningFailureError(f"Could not create HMAC Signature: {exc}", echo) from exc

            if not signature:
                record_signing(request.method, "failed")
                logger.error("signing_failed", key=request.key, method=request.method, error="empty")
                raise SigningFailureError("The HMAC Signature was empty or null.", echo)

        record_signing(request.method, "passed", time.perf_counter() - start)
        log_fields = {
            "key": request.key,
            "method": request.method,
            "timestamp": timestamp,
            "body_included": body_included,
        }
        if self._settings.log_payloads:
            log_fields["payload"] = request.payload
        logger.debug("signature_generated", **log_fields)

        return SigningResult(
            signature=signature,
            key=request.key or "",
            secret=request.secret,
            method=request.method,
            payload=request.payload or "",
            timestamp=timestamp,
        )

    def verify(self, request: SigningRequest, signature: str) -> bool:
        """
        Check an expected signature against the request in constant time.

        The request must carry an explicit timestamp.
        """
        validate_request(request, self._settings)
        if request.timestamp is None:
            raise MissingParameterError(TIMESTAMP, request.echo())
        assert request.secret is not None
        message = self.canonical_message(request, request.timestamp)
        return verify(
            request.secret,
            message,
            signature,
            encoding=self._settings.text_encoding,
            errors=self._settings.encoding_errors,
        )

    def run(self, request: SigningRequest) -> SigningOutcome:
        """Sign a request and report the outcome instead of raising."""
        try:
            result = self.generate(request)
        except (MissingParameterError, InvalidParameterError) as exc:
            logger.info("signing_rejected", field=exc.field, error=exc.message)
            return SigningOutcome(
                status=OutcomeStatus.INVALID,
                message=exc.message,
                inputs=exc.inputs,
                field_name=exc.field,
            )
        except SigningFailureError as exc:
            inputs = exc.inputs
            return SigningOutcome(
                status=OutcomeStatus.FAILED,
                message="Could not create HMAC Signature",
                inputs=inputs,
                details=(
                    f"{exc.message}\n"
                    f"Key: {inputs.get(KEY)}\n"
                    f"Secret: {inputs.get(SECRET)}\n"
                    f"Method: {inputs.get(METHOD)}\n"
                    f"Payload: {inputs.get(PAYLOAD)}\n"
                    f"TimeStamp: {inputs.get(TIMESTAMP)}"
                ),
            )

        return SigningOutcome(
            status=OutcomeStatus.PASSED,
            message=result.summary(),
            inputs=SigningRequest(
                result.key, result.secret, result.method, result.payload
            ).echo(result.timestamp),
            signature=result.signature,
        )


def generate_signature(
    key: str,
    secret: str,
    method: str,
    payload: str,
    timestamp: int | None = None,
    settings: Settings | None = None,
) -> SigningResult:
    """Convenience wrapper around SignatureGenerator.generate."""
    request = SigningRequest(key=key, secret=secret, method=method, payload=payload, timestamp=timestamp)
    return SignatureGenerator(settings).generate(request)
