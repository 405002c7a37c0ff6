"""Bearer token validation for incoming TTS requests."""

import base64
import binascii
import hashlib
import hmac
import re

from compaction_tts.domain.models import AuthResult
from compaction_tts.logging import setup_logging

logger = setup_logging()

BEARER_PREFIX = "Bearer "

_USER_PATTERN = re.compile(r"user_([^_]+)")
_DECODED_USER_PATTERN = re.compile(r"user[_:]([^_:,}]+)", re.IGNORECASE)


def _mask(value: str, keep: int = 10) -> str:
    return value[:keep] + "..."


class TokenValidator:
    """Checks the Authorization header against the configured shared secret."""

    def __init__(self, expected_token: str, min_token_length: int = 10):
        self._expected_token = expected_token
        self._min_token_length = min_token_length

    def validate(self, authorization: str | None) -> AuthResult:
        """
        Validates an Authorization header value.

        Args:
            authorization: Raw header value, e.g. ``"Bearer <token>"``.

        Returns:
            AuthResult; ``subject`` is set only when authenticated and is
            meant for log correlation, never for access decisions.
        """
        if not authorization:
            logger.warning(
                "Authorization header missing",
                extra={"security_event": "auth_missing_header"},
            )
            return AuthResult(authenticated=False)

        if not authorization.startswith(BEARER_PREFIX):
            logger.warning(
                "Authorization header is not a bearer token",
                extra={
                    "security_event": "auth_invalid_format",
                    "authorization": _mask(authorization, 20),
                },
            )
            return AuthResult(authenticated=False)

        token = authorization[len(BEARER_PREFIX) :]

        if len(token) < self._min_token_length:
            logger.warning(
                "Bearer token too short",
                extra={
                    "security_event": "auth_invalid_token_length",
                    "token_length": len(token),
                },
            )
            return AuthResult(authenticated=False)

        if not self._expected_token:
            logger.error(
                "AUTH_TOKEN secret not configured",
                extra={"security_event": "auth_secret_missing"},
            )
            return AuthResult(authenticated=False)

        expected = self._expected_token.strip()
        if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
            logger.warning(
                "Bearer token rejected",
                extra={"security_event": "auth_invalid_token", "token": _mask(token)},
            )
            return AuthResult(authenticated=False)

        subject = self.derive_subject(token)
        logger.info("Authentication succeeded", extra={"subject": subject})
        return AuthResult(authenticated=True, subject=subject)

    @staticmethod
    def derive_subject(token: str) -> str:
        """
        Derives an advisory user identifier from a token.

        Tries a literal ``user_<id>`` marker, then a ``user:<id>`` or
        ``user_<id>`` marker inside the base64-decoded token, and finally
        falls back to a short SHA-256 digest of the token.
        """
        match = _USER_PATTERN.search(token)
        if match:
            return match.group(1)

        try:
            padded = token + "=" * (-len(token) % 4)
            decoded = base64.b64decode(padded).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            decoded = ""

        match = _DECODED_USER_PATTERN.search(decoded)
        if match:
            return match.group(1)

        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"user_{digest[:8]}"
