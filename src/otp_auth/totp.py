"""RFC 6238 TOTP (Time-based One-Time Password) implementation."""

import logging
import time
from datetime import datetime
from typing import Callable, Optional, Union

from otp_auth.constants import (
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    DEFAULT_EPOCH,
    DEFAULT_PERIOD,
    PERIOD_KEY,
    TYPE_TOTP,
)
from otp_auth.hotp import HOTP, codes_equal, is_integer
from otp_auth.provisioning import build_uri


logger = logging.getLogger(__name__)

Timestamp = Union[int, float, datetime]


class TOTP:
    """
    Time-based one-time password generator.

    A TOTP is an HOTP whose counter is the number of whole periods elapsed
    since `epoch_offset`; code derivation is delegated to a wrapped HOTP.
    """

    def __init__(
        self,
        secret: Union[str, bytes],
        digits: int = DEFAULT_DIGITS,
        algorithm: str = DEFAULT_ALGORITHM,
        period: int = DEFAULT_PERIOD,
        epoch_offset: int = DEFAULT_EPOCH,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize a TOTP instance.

        Args:
            secret: Shared secret as raw bytes or base32 key text.
            digits: Code length, 1 to 10 (default: 6).
            algorithm: HMAC hash name (default: "sha1").
            period: Time step in seconds (default: 30).
            epoch_offset: Unix time at which counting starts (default: 0).
            clock: Returns the current Unix time; read once per call when no
                explicit time is given.
        """
        if not is_integer(period) or period <= 0:
            raise ValueError(f"period must be a positive integer, got {period!r}")
        if not is_integer(epoch_offset):
            raise ValueError(f"epoch_offset must be an integer, got {epoch_offset!r}")

        self._hotp = HOTP(secret, digits=digits, algorithm=algorithm)
        self.secret = self._hotp.secret
        self.digits = self._hotp.digits
        self.algorithm = self._hotp.algorithm
        self.period = period
        self.epoch_offset = epoch_offset
        self.clock = clock

    def __repr__(self) -> str:
        return (
            f"TOTP(digits={self.digits}, algorithm={self.algorithm!r}, "
            f"period={self.period})"
        )

    def timecode(self, at_time: Timestamp) -> int:
        """
        Convert a point in time to a counter.

        The division truncates toward zero, so times before the epoch offset
        map to zero or negative counters.
        """
        if isinstance(at_time, datetime):
            at_time = at_time.timestamp()
        delta = int(at_time) - self.epoch_offset
        steps = abs(delta) // self.period
        return steps if delta >= 0 else -steps

    def generate_otp(self, at_time: Optional[Timestamp] = None) -> str:
        """
        Return the code valid at `at_time` (Unix seconds or datetime).

        Raises:
            EncodingError: If `at_time` lies before the epoch offset.
        """
        if at_time is None:
            at_time = self.clock()
        return self._hotp.generate_otp(self.timecode(at_time))

    def now(self) -> str:
        """Return the code for the current time."""
        return self.generate_otp()

    def verify(
        self,
        otp: str,
        at_time: Optional[Timestamp] = None,
        valid_window: int = 0,
    ) -> bool:
        """
        Check `otp` against the code valid at `at_time`.

        Args:
            otp: Candidate code.
            at_time: Unix seconds or datetime; the clock is read once if omitted.
            valid_window: Number of adjacent periods accepted on either side to
                tolerate clock skew (default: 0, exact period only).

        Returns:
            True if the code matches one of the accepted periods.
        """
        if valid_window < 0:
            raise ValueError(f"valid_window must be non-negative, got {valid_window}")
        if at_time is None:
            at_time = self.clock()

        counter = self.timecode(at_time)
        matched = False
        # no early exit: all candidates are compared
        for candidate in range(counter - valid_window, counter + valid_window + 1):
            if candidate < 0:
                continue
            matched |= codes_equal(otp, self._hotp.generate_otp(candidate))

        logger.debug(
            "TOTP verification at counter %d (window %d): %s",
            counter,
            valid_window,
            "ok" if matched else "rejected",
        )
        return matched

    def provisioning_uri(self, label: str, issuer: str = "") -> str:
        """Return the otpauth://totp/ URI for this secret."""
        extra = {}
        if self.period != DEFAULT_PERIOD:
            extra[PERIOD_KEY] = str(self.period)
        return build_uri(
            TYPE_TOTP,
            label,
            issuer,
            self.digits,
            self.secret,
            extra,
            algorithm=self.algorithm,
        )
