"""HMAC signatures for webhook payloads.

Signatures have the form ``"{algorithm}={hexdigest}"`` where the digest is
``HMAC(secret, raw_body)``. Verification compares digests in constant time and
never raises: any malformed input simply fails verification.
"""

import hmac
from typing import Any, Mapping, Union

from ..constants import DEFAULT_SIGNATURE_ALGORITHM
from ..logging import get_logger

logger = get_logger(__name__)

Payload = Union[str, bytes]


def _to_bytes(payload: Payload) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode("utf-8")
    raise TypeError(f"Payload must be str or bytes, not {type(payload).__name__}")


def _digest(payload: Payload, secret: str, algorithm: str) -> str:
    return hmac.new(
        secret.encode("utf-8"),
        _to_bytes(payload),
        algorithm.lower(),
    ).hexdigest()


def generate_signature(
    payload: Payload, secret: str, algorithm: str = DEFAULT_SIGNATURE_ALGORITHM
) -> str:
    """Generate the signature header value for ``payload``.

    Args:
        payload: Raw request body
        secret: Shared webhook secret
        algorithm: hashlib algorithm name

    Returns:
        ``"{algorithm}={hexdigest}"``
    """
    return f"{algorithm}={_digest(payload, secret, algorithm)}"


def verify_signature(
    payload: Payload,
    signature: Any,
    secret: str,
    algorithm: str = DEFAULT_SIGNATURE_ALGORITHM,
) -> bool:
    """Check ``signature`` against the HMAC of ``payload``.

    Accepts ``"{algorithm}={hex}"`` or bare hex. Returns False for any malformed
    signature, unknown algorithm, or empty secret.
    """
    if not isinstance(signature, str) or not signature or not secret:
        return False

    provided = signature.strip()
    if "=" in provided:
        prefix, _, provided = provided.partition("=")
        if prefix.strip().lower() != algorithm.lower():
            return False

    try:
        expected = _digest(payload, secret, algorithm)
        provided_bytes = provided.strip().lower().encode("ascii")
    except (ValueError, TypeError, UnicodeError) as e:
        logger.debug("Signature check failed on malformed input", error=str(e))
        return False

    # constant time over equal-length inputs
    return hmac.compare_digest(provided_bytes, expected.encode("ascii"))


class SignatureVerifier:
    """Verifier bound to one webhook secret."""

    def __init__(self, secret: str):
        """Initialize verifier.

        Raises:
            ValueError: If the secret is empty
        """
        if not secret:
            raise ValueError("Webhook secret is required")
        self._secret = secret

    def verify(
        self, payload: Payload, signature: Any, algorithm: str = DEFAULT_SIGNATURE_ALGORITHM
    ) -> bool:
        return verify_signature(payload, signature, self._secret, algorithm)

    def generate(self, payload: Payload, algorithm: str = DEFAULT_SIGNATURE_ALGORITHM) -> str:
        return generate_signature(payload, self._secret, algorithm)

    @staticmethod
    def verify_event_type(payload: Mapping[str, Any], expected_type: str) -> bool:
        """Check the payload's ``type`` (or ``event``) field."""
        event_type = payload.get("type") or payload.get("event")
        return event_type == expected_type

    def __repr__(self) -> str:
        return "SignatureVerifier(secret=***)"
