"""RFC 4226 HOTP (HMAC-based One-Time Password) implementation."""

import hashlib
import hmac
import logging
from typing import Union

from cryptography.hazmat.primitives import constant_time

from otp_auth.constants import (
    COUNTER_KEY,
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    MAX_DIGITS,
    SUPPORTED_ALGORITHMS,
    TYPE_HOTP,
)
from otp_auth.keycodec import decode_key
from otp_auth.provisioning import build_uri


logger = logging.getLogger(__name__)

COUNTER_BYTES = 8


class EncodingError(ValueError):
    """Raised when a counter cannot be serialized as an unsigned 64-bit integer."""


def is_integer(value: object) -> bool:
    """True for int values, excluding bool."""
    return isinstance(value, int) and not isinstance(value, bool)


def check_digits(digits: int) -> int:
    """Validate a digit count for OTP instances."""
    if not is_integer(digits) or not 1 <= digits <= MAX_DIGITS:
        raise ValueError(f"digits must be an integer from 1 to {MAX_DIGITS}, got {digits!r}")
    return digits


def check_algorithm(algorithm: str) -> str:
    """Validate and normalize a hash algorithm name ("sha1", "SHA256", ...)."""
    name = algorithm.lower()
    if name not in SUPPORTED_ALGORITHMS:
        raise ValueError(
            f"Unsupported algorithm {algorithm!r}, "
            f"expected one of: {', '.join(SUPPORTED_ALGORITHMS)}"
        )
    return name


def secret_bytes(secret: Union[str, bytes]) -> bytes:
    """Return raw secret bytes, decoding key text with the key codec."""
    if isinstance(secret, str):
        return decode_key(secret.strip())
    return bytes(secret)


def normalize_key(key: bytes, algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """
    Bring an HMAC key to exactly one block of the hash function.

    Keys longer than the block size are replaced by their hash, shorter keys
    are right-padded with zero bytes (RFC 2104 section 2).

    Args:
        key: Raw secret bytes.
        algorithm: hashlib name of the HMAC hash.

    Returns:
        The key, block_size bytes long.
    """
    block_size = hashlib.new(algorithm).block_size
    if len(key) > block_size:
        key = hashlib.new(algorithm, key).digest()
    return key.ljust(block_size, b"\0")


def counter_to_bytes(counter: int) -> bytes:
    """Serialize a counter as 8 bytes big-endian."""
    try:
        return counter.to_bytes(COUNTER_BYTES, byteorder="big")
    except (OverflowError, AttributeError) as e:
        raise EncodingError(
            f"Counter must be an integer in [0, 2**64), got {counter!r}"
        ) from e


def truncate(digest: bytes, digits: int = DEFAULT_DIGITS) -> str:
    """
    Dynamic truncation of an HMAC digest (RFC 4226, section 5.3).

    Args:
        digest: HMAC output, at least 20 bytes for the standard hashes.
        digits: Number of digits in the output code.

    Returns:
        A zero-padded decimal code of exactly `digits` characters.

    Raises:
        ValueError: If digits is not positive or the digest is too short.
    """
    if digits < 1:
        raise ValueError(f"digits must be positive, got {digits}")

    offset = digest[-1] & 0x0F
    if len(digest) < offset + 4:
        raise ValueError(
            f"Digest of {len(digest)} bytes is too short for offset {offset}"
        )

    binary = (
        ((digest[offset] & 0x7F) << 24)
        | ((digest[offset + 1] & 0xFF) << 16)
        | ((digest[offset + 2] & 0xFF) << 8)
        | (digest[offset + 3] & 0xFF)
    )

    code = binary % (10**digits)
    return f"{code:0{digits}d}"


def generate_hotp(
    secret: Union[str, bytes],
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Generate an HOTP code using RFC 4226.

    Args:
        secret: The secret as raw bytes or as base32 key text.
        counter: The moving counter value, 0 <= counter < 2**64.
        digits: Number of digits in the output code (default: 6).
        algorithm: HMAC hash, one of sha1, sha256, sha512 (default: sha1).

    Returns:
        A zero-padded HOTP code string.

    Raises:
        DecodeError: If a text secret is not valid base32.
        EncodingError: If the counter is out of range.
    """
    key = normalize_key(secret_bytes(secret), algorithm)
    counter_bytes = counter_to_bytes(counter)
    hmac_digest = hmac.new(key, counter_bytes, algorithm).digest()
    return truncate(hmac_digest, digits)


def codes_equal(candidate: object, expected: str) -> bool:
    """Constant-time comparison of a candidate code with the expected one."""
    if not isinstance(candidate, str):
        return False
    return constant_time.bytes_eq(candidate.encode("utf-8"), expected.encode("ascii"))


class HOTP:
    """
    Counter-based one-time password generator.

    The instance only holds configuration; the caller owns the counter and
    must persist it between calls.
    """

    def __init__(
        self,
        secret: Union[str, bytes],
        digits: int = DEFAULT_DIGITS,
        algorithm: str = DEFAULT_ALGORITHM,
        initial_count: int = 0,
    ):
        """
        Initialize an HOTP instance.

        Args:
            secret: Shared secret as raw bytes or base32 key text.
            digits: Code length, 1 to 10 (default: 6).
            algorithm: HMAC hash name (default: "sha1").
            initial_count: Counter advertised in the provisioning URI.
        """
        self.secret = secret_bytes(secret)
        self.digits = check_digits(digits)
        self.algorithm = check_algorithm(algorithm)
        if not is_integer(initial_count) or initial_count < 0:
            raise ValueError(f"initial_count must be a non-negative integer, got {initial_count!r}")
        self.initial_count = initial_count
        logger.debug("Configured %r", self)

    def __repr__(self) -> str:
        return f"HOTP(digits={self.digits}, algorithm={self.algorithm!r})"

    def generate_otp(self, counter: int) -> str:
        """Return the code for `counter`."""
        return generate_hotp(self.secret, counter, self.digits, self.algorithm)

    def verify(self, otp: str, counter: int) -> bool:
        """
        Check `otp` against the code for `counter`.

        The comparison is on the exact string (leading zeros matter) and runs
        in constant time. A counter outside [0, 2**64) has no code, so any
        candidate is rejected.
        """
        try:
            expected = self.generate_otp(counter)
        except EncodingError:
            logger.debug("HOTP verification at invalid counter %r: rejected", counter)
            return False
        matched = codes_equal(otp, expected)
        logger.debug("HOTP verification at counter %d: %s", counter, "ok" if matched else "rejected")
        return matched

    def provisioning_uri(self, label: str, issuer: str = "") -> str:
        """Return the otpauth://hotp/ URI for this secret."""
        return build_uri(
            TYPE_HOTP,
            label,
            issuer,
            self.digits,
            self.secret,
            {COUNTER_KEY: str(self.initial_count)},
            algorithm=self.algorithm,
        )
