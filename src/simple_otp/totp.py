"""RFC 6238 TOTP (Time-based One-Time Password) implementation."""

import logging
import time
from typing import NamedTuple, Optional, Union

from simple_otp.algorithms import SHA1, HmacAlgorithm
from simple_otp.base32 import decode_secret
from simple_otp.hotp import (
    DEFAULT_DIGITS,
    DYNAMIC,
    MAX_COUNTER,
    codes_equal,
    generate_hotp,
)


logger = logging.getLogger(__name__)

DEFAULT_TIME_STEP = 30
DEFAULT_START_TIME = 0


class TotpMatch(NamedTuple):
    """
    Where in the validation window a TOTP code was found.

    Attributes:
        step: Distance from the current time step (always >= 0).
        position: Signed distance, negative when the code belongs to a past step.
        counter: Absolute counter value the code was generated from.
    """

    step: int
    position: int
    counter: int


def _now(now: Optional[float]) -> float:
    return time.time() if now is None else now


def time_to_counter(
    now: float,
    time_step: int = DEFAULT_TIME_STEP,
    start_offset: float = DEFAULT_START_TIME,
) -> int:
    """
    Convert a Unix time to a TOTP counter.

    Args:
        now: Unix time to convert.
        time_step: Seconds per counter value; 0 selects the 30 second default.
        start_offset: Unix time at which counting starts.

    Returns:
        ``floor((now - start_offset) / time_step)``.

    Raises:
        ValueError: If ``time_step`` is negative or ``now`` is before
            ``start_offset``.
    """
    if time_step < 0:
        raise ValueError(f"Time step must not be negative: {time_step}")
    if not time_step:
        time_step = DEFAULT_TIME_STEP
    if now < start_offset:
        raise ValueError(f"Time {now} is before the start offset {start_offset}")
    return int((now - start_offset) // time_step)


def time_remaining(
    now: Optional[float] = None,
    time_step: int = DEFAULT_TIME_STEP,
    start_offset: float = DEFAULT_START_TIME,
) -> int:
    """Seconds left before the code for ``now`` expires."""
    now = _now(now)
    time_step = time_step or DEFAULT_TIME_STEP
    counter = time_to_counter(now, time_step, start_offset)
    return int(start_offset + (counter + 1) * time_step - now)


def generate_totp(
    secret: Union[str, bytes],
    now: Optional[float] = None,
    time_step: int = DEFAULT_TIME_STEP,
    start_offset: float = DEFAULT_START_TIME,
    digits: int = DEFAULT_DIGITS,
    algorithm: Union[HmacAlgorithm, str] = SHA1,
) -> str:
    """
    Generate a TOTP code using RFC 6238.

    Args:
        secret: The shared secret as bytes, or as a Base32 or Base64 string.
        now: Unix time to generate the code for (default: current time).
        time_step: Seconds each code stays valid; 0 selects 30.
        start_offset: Unix time at which counting starts (default: 0).
        digits: Number of digits in the code (1 to 8).
        algorithm: HMAC algorithm or its name (default: SHA1).

    Returns:
        A zero-padded TOTP code string.
    """
    counter = time_to_counter(_now(now), time_step, start_offset)
    return generate_hotp(secret, counter, digits, False, DYNAMIC, algorithm)


def validate_totp(
    secret: Union[str, bytes],
    candidate: str,
    now: Optional[float] = None,
    time_step: int = DEFAULT_TIME_STEP,
    start_offset: float = DEFAULT_START_TIME,
    window: int = 1,
    algorithm: Union[HmacAlgorithm, str] = SHA1,
) -> Optional[TotpMatch]:
    """
    Validate a TOTP code, tolerating clock skew in both directions.

    The current time step is tried first, then for each distance k from 1
    to ``window`` the step k ahead and the step k behind, so the match
    closest to the current time wins (the future one on a tie).

    Args:
        secret: The shared secret as bytes, or as a Base32 or Base64 string.
        candidate: The code to validate; its length gives the digit count.
        now: Unix time to validate against (default: current time).
        time_step: Seconds each code stays valid; 0 selects 30.
        start_offset: Unix time at which counting starts (default: 0).
        window: How many time steps to search on each side.
        algorithm: HMAC algorithm or its name (default: SHA1).

    Returns:
        A TotpMatch, or None if no code in the window matches.

    Raises:
        InvalidDigitCount: If the candidate is not 1 to 8 characters long.
        InvalidHmacAlgorithm: If ``algorithm`` is not supported.
        ValueError: If the current counter or the window is out of range.
    """
    if window < 0:
        raise ValueError(f"Window must not be negative: {window}")

    if isinstance(secret, str):
        secret = decode_secret(secret)

    current = time_to_counter(_now(now), time_step, start_offset)
    if current > MAX_COUNTER:
        raise ValueError(f"Counter out of range: {current}")
    digits = len(candidate)

    for step in range(window + 1):
        positions = (step, -step) if step else (0,)
        for position in positions:
            counter = current + position
            if not 0 <= counter <= MAX_COUNTER:
                continue
            code = generate_hotp(secret, counter, digits, False, DYNAMIC, algorithm)
            if codes_equal(code, candidate):
                logger.debug(
                    "TOTP matched at position %+d (counter %d)", position, counter
                )
                return TotpMatch(step=step, position=position, counter=counter)

    logger.debug("TOTP not found within %d steps of counter %d", window, current)
    return None
