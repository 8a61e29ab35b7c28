"""Command-line interface for otp-auth."""

import argparse
import logging
import sys
from typing import List, Optional

from otp_auth.constants import (
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    MAX_DIGITS,
    SECRET_BYTES,
    SUPPORTED_ALGORITHMS,
    TYPE_HOTP,
    TYPE_TOTP,
)
from otp_auth.hotp import HOTP
from otp_auth.keycodec import encode_key, random_secret
from otp_auth.otp import OTP
from otp_auth.totp import TOTP


logger = logging.getLogger(__name__)


def build_otp(args: argparse.Namespace) -> OTP:
    """Create the HOTP or TOTP instance described by the shared options."""
    if args.type == TYPE_HOTP:
        return HOTP(
            args.secret,
            digits=args.digits,
            algorithm=args.algorithm,
            initial_count=getattr(args, "counter", None) or 0,
        )
    return TOTP(args.secret, digits=args.digits, algorithm=args.algorithm, period=args.period)


def _moving_factor(args: argparse.Namespace) -> Optional[int]:
    """Counter for HOTP, explicit time (or None for now) for TOTP."""
    if args.type == TYPE_HOTP:
        if args.time is not None:
            raise ValueError("--time is not supported for HOTP, use --counter")
        if args.counter is None:
            raise ValueError("--counter is required for HOTP")
        return args.counter
    if args.counter is not None:
        raise ValueError("--counter is not supported for TOTP, use --time")
    return args.time


def code_command(args: argparse.Namespace) -> int:
    """Handle the code command."""
    try:
        otp = build_otp(args)
        print(otp.generate_otp(_moving_factor(args)))
        return 0
    except ValueError as e:
        print(f"✗ Failed to generate code: {e}", file=sys.stderr)
        return 1


def verify_command(args: argparse.Namespace) -> int:
    """Handle the verify command."""
    try:
        otp = build_otp(args)
        moving_factor = _moving_factor(args)
        if isinstance(otp, TOTP):
            accepted = otp.verify(args.otp, moving_factor, valid_window=args.window)
        else:
            accepted = otp.verify(args.otp, moving_factor)
    except ValueError as e:
        print(f"✗ Verification failed: {e}", file=sys.stderr)
        return 1

    if accepted:
        print("✓ Code accepted", file=sys.stderr)
        return 0
    print("✗ Code rejected", file=sys.stderr)
    return 1


def uri_command(args: argparse.Namespace) -> int:
    """Handle the uri command."""
    try:
        otp = build_otp(args)
        print(otp.provisioning_uri(args.label, args.issuer))
        return 0
    except ValueError as e:
        print(f"✗ Failed to build provisioning URI: {e}", file=sys.stderr)
        return 1


def secret_command(args: argparse.Namespace) -> int:
    """Handle the secret command."""
    try:
        print(encode_key(random_secret(args.length)))
        return 0
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1


def _add_otp_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--secret",
        "-s",
        required=True,
        help="Shared secret as unpadded base32 (extended hex alphabet)",
    )
    parser.add_argument(
        "--type",
        "-t",
        default=TYPE_TOTP,
        choices=[TYPE_HOTP, TYPE_TOTP],
        help="OTP type (default: totp)",
    )
    parser.add_argument(
        "--digits",
        "-d",
        type=int,
        default=DEFAULT_DIGITS,
        choices=range(1, MAX_DIGITS + 1),
        metavar="N",
        help=f"Number of digits in the code (default: {DEFAULT_DIGITS})",
    )
    parser.add_argument(
        "--algorithm",
        "-a",
        default=DEFAULT_ALGORITHM,
        choices=SUPPORTED_ALGORITHMS,
        help=f"HMAC hash algorithm (default: {DEFAULT_ALGORITHM})",
    )
    parser.add_argument(
        "--period",
        "-p",
        type=int,
        default=DEFAULT_PERIOD,
        help=f"TOTP time step in seconds (default: {DEFAULT_PERIOD})",
    )


def _add_moving_factor_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--counter",
        "-c",
        type=int,
        default=None,
        help="HOTP counter value",
    )
    parser.add_argument(
        "--time",
        type=int,
        default=None,
        help="Unix time for TOTP (default: now)",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="HOTP/TOTP one-time password tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Code command
    code_parser = subparsers.add_parser(
        "code",
        aliases=["generate", "gen"],
        help="Generate a one-time password",
    )
    _add_otp_options(code_parser)
    _add_moving_factor_options(code_parser)

    # Verify command
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a one-time password",
    )
    verify_parser.add_argument("otp", help="Code to verify")
    _add_otp_options(verify_parser)
    _add_moving_factor_options(verify_parser)
    verify_parser.add_argument(
        "--window",
        "-w",
        type=int,
        default=0,
        help="TOTP periods accepted on either side for clock skew (default: 0)",
    )

    # URI command
    uri_parser = subparsers.add_parser(
        "uri",
        help="Print the provisioning URI for an authenticator app",
    )
    _add_otp_options(uri_parser)
    uri_parser.add_argument("--label", "-l", required=True, help="Account label")
    uri_parser.add_argument("--issuer", "-i", default="", help="Issuer name")
    uri_parser.add_argument(
        "--counter",
        "-c",
        type=int,
        default=0,
        help="Initial HOTP counter advertised in the URI (default: 0)",
    )

    # Secret command
    secret_parser = subparsers.add_parser(
        "secret",
        help="Generate a random shared secret",
    )
    secret_parser.add_argument(
        "--length",
        type=int,
        default=SECRET_BYTES,
        help=f"Secret length in bytes (default: {SECRET_BYTES})",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    logger.debug("Running %s command", args.command)

    if args.command in ("code", "generate", "gen"):
        return code_command(args)
    elif args.command == "verify":
        return verify_command(args)
    elif args.command == "uri":
        return uri_command(args)
    elif args.command == "secret":
        return secret_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
