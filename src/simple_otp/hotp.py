"""RFC 4226 HOTP (HMAC-based One-Time Password) implementation."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from cryptography.hazmat.primitives import constant_time

from simple_otp.algorithms import SHA1, HmacAlgorithm, get_algorithm
from simple_otp.base32 import decode_secret
from simple_otp.errors import FormatError, InvalidDigitCount


logger = logging.getLogger(__name__)

DEFAULT_DIGITS = 6
MIN_DIGITS = 1
MAX_DIGITS = 8
MAX_COUNTER = 2**64 - 1

# Digit substitution used for every other digit of the checksum
CHECKSUM_DOUBLE_DIGITS = (0, 2, 4, 6, 8, 1, 3, 5, 7, 9)


@dataclass(frozen=True)
class Dynamic:
    """Truncate at the offset given by the low nibble of the last HMAC byte."""


@dataclass(frozen=True)
class Explicit:
    """
    Truncate at a fixed byte offset into the HMAC.

    Offsets outside ``[0, digest_size - 4]`` are ignored and dynamic
    truncation is used instead.
    """

    offset: int


Truncation = Union[Dynamic, Explicit]

DYNAMIC = Dynamic()


def hotp_length(digits: int, add_checksum: bool = False) -> int:
    """Length of a generated code, including the checksum digit if any."""
    return digits + 1 if add_checksum else digits


def checksum_digit(value: int, digits: int) -> int:
    """
    Compute the check digit for the ``digits`` least significant digits of ``value``.

    Digits are scanned from the least significant one, every other digit
    (starting with the first) being replaced through
    CHECKSUM_DOUBLE_DIGITS before summing.

    Args:
        value: The numeric code.
        digits: Number of decimal digits of ``value`` to examine.

    Returns:
        The digit that makes the extended code sum to a multiple of ten.
    """
    total = 0
    double_digit = True
    for _ in range(digits):
        value, digit = divmod(value, 10)
        if double_digit:
            digit = CHECKSUM_DOUBLE_DIGITS[digit]
        total += digit
        double_digit = not double_digit
    return (10 - total % 10) % 10


def codes_equal(code: str, candidate: str) -> bool:
    """Compare two codes in constant time."""
    return constant_time.bytes_eq(code.encode("utf-8"), candidate.encode("utf-8"))


def _truncation_offset(digest: bytes, truncation: Truncation) -> int:
    if isinstance(truncation, Explicit):
        offset = truncation.offset
        if isinstance(offset, int) and 0 <= offset <= len(digest) - 4:
            return offset
    return digest[-1] & 0x0F


def generate_hotp(
    secret: Union[str, bytes],
    counter: int,
    digits: int = DEFAULT_DIGITS,
    add_checksum: bool = False,
    truncation: Truncation = DYNAMIC,
    algorithm: Union[HmacAlgorithm, str] = SHA1,
) -> str:
    """
    Generate an HOTP code using RFC 4226.

    Args:
        secret: The shared secret as bytes, or as a Base32 or Base64 string.
            Strings are always decoded, so a plain-text secret such as
            "12345678901234567890" must be passed as bytes.
        counter: The moving counter value, an unsigned 64-bit integer.
        digits: Number of digits in the code, excluding the checksum (1 to 8).
        add_checksum: Append a check digit to the code.
        truncation: Dynamic() (default) or Explicit(offset).
        algorithm: HMAC algorithm or its name (default: SHA1).

    Returns:
        A zero-padded code of ``hotp_length(digits, add_checksum)`` characters.

    Raises:
        InvalidDigitCount: If ``digits`` is outside 1 to 8.
        InvalidHmacAlgorithm: If ``algorithm`` is not supported.
        FormatError: If the formatted code has an unexpected length.
        ValueError: If the counter is out of range or the secret cannot be decoded.
    """
    if not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise InvalidDigitCount(
            f"Unsupported number of digits: {digits} "
            f"(expected {MIN_DIGITS} to {MAX_DIGITS})"
        )
    if not 0 <= counter <= MAX_COUNTER:
        raise ValueError(f"Counter out of range: {counter}")

    hmac_algorithm = get_algorithm(algorithm)

    # Decode secret if it's a string
    if isinstance(secret, str):
        raw_secret = decode_secret(secret)
    else:
        raw_secret = bytes(secret)

    # Convert counter to 8-byte big-endian integer
    counter_bytes = counter.to_bytes(8, byteorder="big")

    hmac_digest = hmac_algorithm.digest(raw_secret, counter_bytes)

    # Truncation (RFC 4226, Section 5.4)
    offset = _truncation_offset(hmac_digest, truncation)
    binary = (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )

    code = binary % (10**digits)

    if add_checksum:
        code = code * 10 + checksum_digit(code, digits)
    length = hotp_length(digits, add_checksum)

    formatted = f"{code:0{length}d}"
    if len(formatted) != length:
        raise FormatError(f"Formatted code {formatted!r} is not {length} digits long")
    return formatted


def validate_hotp(
    secret: Union[str, bytes],
    counter: int,
    window: int,
    candidate: str,
    algorithm: Union[HmacAlgorithm, str] = SHA1,
) -> Optional[int]:
    """
    Validate an HOTP code against a window of counters.

    Counters ``counter`` to ``counter + window`` (inclusive) are tried in
    order. The number of digits is taken from the length of ``candidate``.

    Args:
        secret: The shared secret as bytes, or as a Base32 or Base64 string.
        counter: The first counter value to try.
        window: How many counters after ``counter`` to try as well.
        candidate: The code to validate.
        algorithm: HMAC algorithm or its name (default: SHA1).

    Returns:
        The position of the matching counter in the window (0 is ``counter``
        itself), or None if no code in the window matches.

    Raises:
        InvalidDigitCount: If the candidate is not 1 to 8 characters long.
        InvalidHmacAlgorithm: If ``algorithm`` is not supported.
        ValueError: If the start counter or the window is out of range.
    """
    if window < 0:
        raise ValueError(f"Window must not be negative: {window}")
    if not 0 <= counter <= MAX_COUNTER:
        raise ValueError(f"Counter out of range: {counter}")

    if isinstance(secret, str):
        secret = decode_secret(secret)

    digits = len(candidate)
    for position in range(window + 1):
        if counter + position > MAX_COUNTER:
            break
        code = generate_hotp(
            secret, counter + position, digits, False, DYNAMIC, algorithm
        )
        if codes_equal(code, candidate):
            logger.debug(
                "HOTP matched at position %d (counter %d)", position, counter + position
            )
            return position

    logger.debug("HOTP not found in counters %d..%d", counter, counter + window)
    return None
