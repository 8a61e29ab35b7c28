"""Text encoding of shared secrets (base32, RFC 4648 "extended hex" alphabet)."""

import base64
import logging
import secrets

from otp_auth.constants import MIN_SECRET_BYTES, SECRET_BYTES


logger = logging.getLogger(__name__)

CHARSET = "ascii"


class DecodeError(ValueError):
    """Raised when key text is not valid extended-hex base32."""


def encode_key(secret: bytes) -> str:
    """
    Encode a secret as unpadded base32 using the extended hex alphabet.

    Args:
        secret: Raw secret bytes.

    Returns:
        Base32 text without trailing '=' characters.
    """
    encoded = base64.b32hexencode(secret).decode(CHARSET)
    return encoded.rstrip("=")


def decode_key(text: str) -> bytes:
    """
    Decode extended-hex base32 text, tolerating missing padding.

    Args:
        text: Base32 text as produced by encode_key (padding optional).

    Returns:
        Raw secret bytes.

    Raises:
        DecodeError: If the text contains characters outside the alphabet
            or has an impossible length.
    """
    missing_padding = len(text) % 8
    if missing_padding:
        text += "=" * (8 - missing_padding)

    try:
        return base64.b32hexdecode(text)
    except ValueError as e:
        # binascii.Error is a ValueError, as is non-ASCII str input
        raise DecodeError(f"Invalid base32 key: {e}") from e


def random_secret(length: int = SECRET_BYTES) -> bytes:
    """Return `length` random bytes suitable as a shared secret."""
    if length < MIN_SECRET_BYTES:
        raise ValueError(
            f"Secret length must be at least {MIN_SECRET_BYTES} bytes, got {length}"
        )
    logger.debug("Generating %d-byte random secret", length)
    return secrets.token_bytes(length)
