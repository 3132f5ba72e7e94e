"""hmacsign signer - request signature generation."""

from hmacsign.signer.clock import current_millis, round_half_up_millis
from hmacsign.signer.generator import SignatureGenerator, generate_signature, validate_request
from hmacsign.signer.models import OutcomeStatus, SigningOutcome, SigningRequest, SigningResult

__all__ = [
    "SignatureGenerator",
    "SigningRequest",
    "SigningResult",
    "SigningOutcome",
    "OutcomeStatus",
    "generate_signature",
    "validate_request",
    "current_millis",
    "round_half_up_millis",
]
