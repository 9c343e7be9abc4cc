"""Command-line interface for simple-otp."""

import argparse
import logging
import sys
import time
from typing import Optional

from simple_otp import base32
from simple_otp.algorithms import ALGORITHMS
from simple_otp.errors import OtpError, Status
from simple_otp.hotp import (
    DEFAULT_DIGITS,
    DYNAMIC,
    Explicit,
    generate_hotp,
    validate_hotp,
)
from simple_otp.totp import (
    DEFAULT_START_TIME,
    DEFAULT_TIME_STEP,
    generate_totp,
    time_remaining,
    time_to_counter,
    validate_totp,
)


# Same secret as the RFC 4226 and RFC 6238 test vectors
DEMO_SECRET = b"12345678901234567890"


def _secret(args: argparse.Namespace) -> bytes:
    if args.raw:
        return args.secret.encode("utf-8")
    return base32.decode_secret(args.secret)


def _now(args: argparse.Namespace) -> int:
    return int(time.time()) if args.time is None else args.time


def _report_mismatch(code: str) -> int:
    print(f"✗ Invalid OTP: {code} (status {Status.INVALID_OTP.name})", file=sys.stderr)
    return 1


def hotp_command(args: argparse.Namespace) -> int:
    """Handle the hotp command."""
    try:
        truncation = DYNAMIC if args.offset is None else Explicit(args.offset)
        code = generate_hotp(
            _secret(args),
            args.counter,
            digits=args.digits,
            add_checksum=args.checksum,
            truncation=truncation,
            algorithm=args.algorithm,
        )
        print(code)
        return 0
    except OtpError as e:
        print(f"✗ {e} (status {e.status.name})", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"✗ Failed to generate code: {e}", file=sys.stderr)
        return 1


def totp_command(args: argparse.Namespace) -> int:
    """Handle the totp command."""
    try:
        now = _now(args)
        code = generate_totp(
            _secret(args),
            now,
            time_step=args.step,
            start_offset=args.start,
            digits=args.digits,
            algorithm=args.algorithm,
        )
        print(code)
        if args.verbose:
            remaining = time_remaining(now, args.step, args.start)
            print(f"  Valid for another {remaining}s", file=sys.stderr)
        return 0
    except OtpError as e:
        print(f"✗ {e} (status {e.status.name})", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"✗ Failed to generate code: {e}", file=sys.stderr)
        return 1


def check_hotp_command(args: argparse.Namespace) -> int:
    """Handle the check-hotp command."""
    try:
        position = validate_hotp(
            _secret(args),
            args.counter,
            args.window,
            args.code,
            algorithm=args.algorithm,
        )
    except OtpError as e:
        print(f"✗ {e} (status {e.status.name})", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"✗ Failed to validate code: {e}", file=sys.stderr)
        return 1

    if position is None:
        return _report_mismatch(args.code)

    print(
        f"✓ Valid OTP at position {position} "
        f"(counter: {args.counter + position}, status {Status.OK.name})"
    )
    print(f"  Next counter: {args.counter + position + 1}")
    return 0


def check_totp_command(args: argparse.Namespace) -> int:
    """Handle the check-totp command."""
    try:
        match = validate_totp(
            _secret(args),
            args.code,
            now=_now(args),
            time_step=args.step,
            start_offset=args.start,
            window=args.window,
            algorithm=args.algorithm,
        )
    except OtpError as e:
        print(f"✗ {e} (status {e.status.name})", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"✗ Failed to validate code: {e}", file=sys.stderr)
        return 1

    if match is None:
        return _report_mismatch(args.code)

    print(
        f"✓ Valid OTP at position {match.position:+d} "
        f"(counter: {match.counter}, status {Status.OK.name})"
    )
    return 0


def base32_command(args: argparse.Namespace) -> int:
    """Handle the base32 command."""
    try:
        if args.action == "encode":
            print(base32.encode(args.value.encode("utf-8")))
        else:
            print(base32.decode(args.value).decode("utf-8", errors="replace"))
        return 0
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1


def demo_command(args: argparse.Namespace) -> int:
    """Handle the demo command."""
    secret = DEMO_SECRET
    now = int(time.time())

    print("OTP library example and quick testing")
    print()
    for counter in range(10):
        print(f"HOTP {counter} : {generate_hotp(secret, counter)}")

    print()
    for i in range(10):
        code = generate_totp(secret, now + i * DEFAULT_TIME_STEP)
        print(f"TOTP {i} : {code}")

    print()
    print("Base32 tests")
    encoded = base32.encode(secret)
    print(f"Encoded : {encoded}")
    print(f"Decoded : {base32.decode(encoded).decode('ascii')}")

    print()
    print("Testing validation function for HOTP")
    # 162583 is the code for counter 7
    for window in (10, 2):
        position = validate_hotp(secret, 3, window, "162583")
        result = Status.INVALID_OTP.name if position is None else position
        print(f"Res {result} : counter 3 window {window} otp : 162583")

    print()
    print("Testing validation function for TOTP")
    for steps_ahead in (0, 7):
        code = generate_totp(secret, now + steps_ahead * DEFAULT_TIME_STEP)
        match = validate_totp(secret, code, now=now, window=2)
        result = Status.INVALID_OTP.name if match is None else match.position
        print(f"Res {result} : totp {code} ({steps_ahead} steps ahead, window 2)")

    print()
    print(f"Current counter: {time_to_counter(now)}")
    return 0


def _add_secret_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "secret",
        help="Shared secret as Base32 (or Base64) text",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Use the secret argument as literal bytes instead of decoding it",
    )
    parser.add_argument(
        "--algorithm",
        "-a",
        default="SHA1",
        type=str.upper,
        choices=sorted(ALGORITHMS),
        help="HMAC algorithm (default: SHA1)",
    )


def _add_time_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--time",
        "-t",
        type=int,
        default=None,
        help="Unix time to use (default: now)",
    )
    parser.add_argument(
        "--step",
        "-s",
        type=int,
        default=DEFAULT_TIME_STEP,
        help=f"Time step in seconds (default: {DEFAULT_TIME_STEP})",
    )
    parser.add_argument(
        "--start",
        type=int,
        default=DEFAULT_START_TIME,
        help=f"Unix time at which time steps start (default: {DEFAULT_START_TIME})",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="HOTP/TOTP one-time password generator and validator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # HOTP command
    hotp_parser = subparsers.add_parser(
        "hotp",
        help="Generate an HOTP code",
    )
    _add_secret_arguments(hotp_parser)
    hotp_parser.add_argument(
        "--counter",
        "-c",
        type=int,
        default=0,
        help="Counter value (default: 0)",
    )
    hotp_parser.add_argument(
        "--digits",
        "-d",
        type=int,
        default=DEFAULT_DIGITS,
        help=f"Number of digits in the code (default: {DEFAULT_DIGITS})",
    )
    hotp_parser.add_argument(
        "--checksum",
        action="store_true",
        help="Append a checksum digit",
    )
    hotp_parser.add_argument(
        "--offset",
        type=int,
        default=None,
        help="Fixed truncation offset (default: dynamic truncation)",
    )

    # TOTP command
    totp_parser = subparsers.add_parser(
        "totp",
        help="Generate a TOTP code",
    )
    _add_secret_arguments(totp_parser)
    _add_time_arguments(totp_parser)
    totp_parser.add_argument(
        "--digits",
        "-d",
        type=int,
        default=DEFAULT_DIGITS,
        help=f"Number of digits in the code (default: {DEFAULT_DIGITS})",
    )

    # Check HOTP command
    check_hotp_parser = subparsers.add_parser(
        "check-hotp",
        help="Validate an HOTP code",
    )
    _add_secret_arguments(check_hotp_parser)
    check_hotp_parser.add_argument("code", help="Code to validate")
    check_hotp_parser.add_argument(
        "--counter",
        "-c",
        type=int,
        default=0,
        help="First counter value to try (default: 0)",
    )
    check_hotp_parser.add_argument(
        "--window",
        "-w",
        type=int,
        default=10,
        help="Number of following counters to try (default: 10)",
    )

    # Check TOTP command
    check_totp_parser = subparsers.add_parser(
        "check-totp",
        help="Validate a TOTP code",
    )
    _add_secret_arguments(check_totp_parser)
    check_totp_parser.add_argument("code", help="Code to validate")
    _add_time_arguments(check_totp_parser)
    check_totp_parser.add_argument(
        "--window",
        "-w",
        type=int,
        default=1,
        help="Number of time steps to try on each side (default: 1)",
    )

    # Base32 command
    base32_parser = subparsers.add_parser(
        "base32",
        help="Encode or decode Base32 text",
    )
    base32_parser.add_argument("action", choices=["encode", "decode"])
    base32_parser.add_argument("value", help="Text to encode or decode")

    # Demo command
    subparsers.add_parser(
        "demo",
        help="Print RFC test codes and validation examples",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "hotp":
        return hotp_command(args)
    elif args.command == "totp":
        return totp_command(args)
    elif args.command == "check-hotp":
        return check_hotp_command(args)
    elif args.command == "check-totp":
        return check_totp_command(args)
    elif args.command == "base32":
        return base32_command(args)
    elif args.command == "demo":
        return demo_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
