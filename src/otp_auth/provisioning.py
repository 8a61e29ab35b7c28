"""Provisioning URIs (otpauth://) for authenticator applications."""

import logging
from typing import Dict, Optional
from urllib.parse import quote, urlencode

from otp_auth.constants import (
    ALGORITHM_KEY,
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    DIGITS_KEY,
    ISSUER_KEY,
    OTPAUTH_SCHEME,
    SECRET_KEY,
    TYPE_HOTP,
    TYPE_TOTP,
)
from otp_auth.keycodec import encode_key


logger = logging.getLogger(__name__)


def build_uri(
    otp_type: str,
    account_label: str,
    issuer: str,
    digits: int,
    secret: bytes,
    extra: Optional[Dict[str, str]] = None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Build an otpauth:// URI following the Key Uri Format.

    The path is "issuer:label" with both parts percent-encoded. Query
    parameters are sorted by key so the output is stable; digits and
    algorithm are only included when they differ from the defaults.

    Args:
        otp_type: "hotp" or "totp".
        account_label: Account name shown in the authenticator.
        issuer: Issuer name, written to both path and query even when empty.
        digits: Code length.
        secret: Raw secret bytes, encoded with the key codec.
        extra: Additional query parameters (period, counter, ...).
        algorithm: HMAC hash name.

    Returns:
        The provisioning URI.

    Raises:
        ValueError: If otp_type is not hotp or totp.
    """
    if otp_type not in (TYPE_HOTP, TYPE_TOTP):
        raise ValueError(f"Unknown OTP type {otp_type!r}, expected hotp or totp")

    params = dict(extra or {})
    params[SECRET_KEY] = encode_key(secret)
    params[ISSUER_KEY] = issuer
    if digits != DEFAULT_DIGITS:
        params[DIGITS_KEY] = str(digits)
    if algorithm.lower() != DEFAULT_ALGORITHM:
        params[ALGORITHM_KEY] = algorithm.upper()

    path = f"{quote(issuer, safe='')}:{quote(account_label, safe='')}"

    query = urlencode(sorted(params.items()), quote_via=quote)
    logger.debug("Built %s provisioning URI with parameters %s", otp_type, sorted(params))
    return f"{OTPAUTH_SCHEME}://{otp_type}/{path}?{query}"
