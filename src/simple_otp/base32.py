"""Base32 helpers for OTP secrets."""

import base64
import binascii


def encoded_length(n: int) -> int:
    """Length of the padded Base32 text for ``n`` input bytes."""
    return (n + 4) // 5 * 8


def decoded_length(n: int) -> int:
    """Upper bound on the bytes decoded from ``n`` Base32 characters."""
    return n * 5 // 8


def encode(data: bytes) -> str:
    """Encode bytes as padded, upper-case Base32 text."""
    return base64.b32encode(data).decode("ascii")


def decode(text: str) -> bytes:
    """
    Decode Base32 text.

    Whitespace is ignored, letters may be of either case and the trailing
    "=" padding may be omitted.

    Raises:
        ValueError: If the text is not valid Base32.
    """
    cleaned = "".join(text.split()).rstrip("=").upper()
    cleaned += "=" * (-len(cleaned) % 8)
    try:
        return base64.b32decode(cleaned)
    except binascii.Error as e:
        raise ValueError(f"Invalid Base32 text: {e}") from e


def decode_secret(secret: str) -> bytes:
    """
    Decode an OTP secret from Base32 (preferred) or Base64.

    Args:
        secret: The encoded secret string.

    Returns:
        Decoded secret as bytes.

    Raises:
        ValueError: If the secret cannot be decoded from either format.
    """
    secret = secret.strip()
    # Try Base32 first (common for OTP secrets)
    try:
        return decode(secret)
    except ValueError:
        pass

    # Fall back to Base64
    try:
        return base64.b64decode(secret, validate=True)
    except binascii.Error as e:
        raise ValueError(
            f"Unable to decode OTP secret from Base32 or Base64: {e}"
        ) from e
