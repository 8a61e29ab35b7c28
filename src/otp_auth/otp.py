"""Common OTP interface and provisioning URI parsing."""

import logging
from typing import NamedTuple, Protocol
from urllib.parse import parse_qs, unquote, urlparse

from otp_auth.constants import (
    ALGORITHM_KEY,
    COUNTER_KEY,
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    DIGITS_KEY,
    ISSUER_KEY,
    OTPAUTH_SCHEME,
    PERIOD_KEY,
    SECRET_KEY,
    TYPE_HOTP,
    TYPE_TOTP,
)
from otp_auth.hotp import HOTP
from otp_auth.keycodec import decode_key
from otp_auth.totp import TOTP


logger = logging.getLogger(__name__)


class OTP(Protocol):
    """Capabilities shared by HOTP and TOTP."""

    def generate_otp(self, counter: int, /) -> str:
        ...

    def verify(self, otp: str, counter: int, /) -> bool:
        ...

    def provisioning_uri(self, label: str, issuer: str = "") -> str:
        ...


class ParsedUri(NamedTuple):
    otp: OTP
    label: str
    issuer: str


def _int_param(query: dict, key: str, default: int) -> int:
    raw_value = query.get(key, [None])[0]
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError as e:
        raise ValueError(f"Invalid '{key}' parameter: {raw_value!r}") from e


def from_uri(uri: str) -> ParsedUri:
    """
    Rebuild an OTP instance from an otpauth:// provisioning URI.

    Args:
        uri: A URI as produced by HOTP.provisioning_uri or TOTP.provisioning_uri.

    Returns:
        The HOTP or TOTP instance together with the account label and issuer.

    Raises:
        ValueError: If the URI is not a valid otpauth URI.
        DecodeError: If the secret is not valid base32.
    """
    parsed = urlparse(uri.strip())
    if parsed.scheme != OTPAUTH_SCHEME:
        raise ValueError(f"Invalid scheme {parsed.scheme!r}, expected {OTPAUTH_SCHEME!r}")

    otp_type = parsed.netloc.lower()
    if otp_type not in (TYPE_HOTP, TYPE_TOTP):
        raise ValueError(f"Unknown OTP type {parsed.netloc!r}")

    qs = parse_qs(parsed.query)
    raw_secret = qs.get(SECRET_KEY, [None])[0]
    if raw_secret is None:
        raise ValueError("Provisioning URI missing 'secret=' parameter")
    secret = decode_key(raw_secret)

    # path is "/issuer:label" or "/label"
    path = parsed.path.lstrip("/")
    if ":" in path:
        path_issuer, label = path.split(":", 1)
        path_issuer = unquote(path_issuer)
    else:
        path_issuer, label = "", path
    label = unquote(label)
    issuer = qs.get(ISSUER_KEY, [path_issuer])[0]

    digits = _int_param(qs, DIGITS_KEY, DEFAULT_DIGITS)
    algorithm = qs.get(ALGORITHM_KEY, [DEFAULT_ALGORITHM])[0]

    otp: OTP
    if otp_type == TYPE_HOTP:
        otp = HOTP(
            secret,
            digits=digits,
            algorithm=algorithm,
            initial_count=_int_param(qs, COUNTER_KEY, 0),
        )
    else:
        otp = TOTP(
            secret,
            digits=digits,
            algorithm=algorithm,
            period=_int_param(qs, PERIOD_KEY, DEFAULT_PERIOD),
        )

    logger.debug("Parsed %s provisioning URI: %r", otp_type, otp)
    return ParsedUri(otp=otp, label=label, issuer=issuer)
