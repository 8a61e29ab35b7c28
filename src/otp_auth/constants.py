"""Default values and URI vocabulary shared across the package."""

from typing import Final, Tuple


DEFAULT_DIGITS: Final = 6
MAX_DIGITS: Final = 10  # a 31-bit truncated value has at most 10 decimal digits
DEFAULT_PERIOD: Final = 30
DEFAULT_EPOCH: Final = 0
DEFAULT_ALGORITHM: Final = "sha1"
SUPPORTED_ALGORITHMS: Final[Tuple[str, ...]] = ("sha1", "sha256", "sha512")

SECRET_BYTES: Final = 20  # 160-bit secret, RFC 4226 section 4
MIN_SECRET_BYTES: Final = 16

OTPAUTH_SCHEME: Final = "otpauth"
TYPE_HOTP: Final = "hotp"
TYPE_TOTP: Final = "totp"

SECRET_KEY: Final = "secret"
ISSUER_KEY: Final = "issuer"
DIGITS_KEY: Final = "digits"
PERIOD_KEY: Final = "period"
COUNTER_KEY: Final = "counter"
ALGORITHM_KEY: Final = "algorithm"
