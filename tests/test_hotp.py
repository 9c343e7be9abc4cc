"""Tests for HOTP generation, checksum and validation."""

import pytest

from simple_otp.algorithms import SHA256, SHA512
from simple_otp.errors import InvalidDigitCount, InvalidHmacAlgorithm, Status
from simple_otp.hotp import (
    DYNAMIC,
    Explicit,
    checksum_digit,
    generate_hotp,
    hotp_length,
    validate_hotp,
)


SECRET = b"12345678901234567890"

# RFC 4226 test vectors (Appendix D)
# Secret: "12345678901234567890" (Base32: GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ)
RFC4226_TEST_VECTORS = [
    # (counter, expected_code)
    (0, "755224"),
    (1, "287082"),
    (2, "359152"),
    (3, "969429"),
    (4, "338314"),
    (5, "254676"),
    (6, "287922"),
    (7, "162583"),
    (8, "399871"),
    (9, "520489"),
]


def _luhn_valid(code: str) -> bool:
    total = 0
    for i, char in enumerate(reversed(code)):
        digit = int(char)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


@pytest.mark.parametrize("counter,expected_code", RFC4226_TEST_VECTORS)
def test_rfc4226_test_vectors(counter, expected_code):
    """Test HOTP generation against RFC 4226 test vectors."""
    assert generate_hotp(SECRET, counter, digits=6) == expected_code


def test_hotp_base32_secret():
    """Test that Base32 secrets are decoded correctly."""
    secret_base32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
    assert generate_hotp(secret_base32, 0, digits=6) == "755224"


def test_hotp_base64_secret():
    """Test that Base64 secrets are decoded correctly."""
    # Base64 encoded "12345678901234567890"
    secret_base64 = "MTIzNDU2Nzg5MDEyMzQ1Njc4OTA="
    assert generate_hotp(secret_base64, 0, digits=6) == "755224"


def test_hotp_invalid_secret():
    """Test that invalid secrets raise ValueError."""
    with pytest.raises(ValueError, match="Unable to decode"):
        generate_hotp("not-a-valid-secret", 0, digits=6)


@pytest.mark.parametrize("digits", range(1, 9))
@pytest.mark.parametrize("add_checksum", [False, True])
def test_hotp_code_length(digits, add_checksum):
    """Test that codes have exactly the requested length."""
    code = generate_hotp(SECRET, 3, digits=digits, add_checksum=add_checksum)
    assert len(code) == hotp_length(digits, add_checksum)
    assert len(code) == digits + (1 if add_checksum else 0)
    assert code.isdigit()


def test_hotp_different_digits():
    """Test that shorter codes are suffixes of longer ones."""
    code_6 = generate_hotp(SECRET, 0, digits=6)
    code_7 = generate_hotp(SECRET, 0, digits=7)
    code_8 = generate_hotp(SECRET, 0, digits=8)

    assert code_7.endswith(code_6)
    assert code_8.endswith(code_7)
    # Truncated value for counter 0 is 1284755224
    assert code_8 == "84755224"


def test_hotp_leading_zeros_preserved():
    """Test that short codes keep leading zeros."""
    # Truncated value for counter 2 is 137359152
    assert generate_hotp(SECRET, 2, digits=8) == "37359152"
    assert generate_hotp(SECRET, 2, digits=1) == "2"


@pytest.mark.parametrize("digits", [0, 9, -1, 10])
def test_hotp_invalid_digit_count(digits):
    """Test that unsupported digit counts are rejected."""
    with pytest.raises(InvalidDigitCount) as exc_info:
        generate_hotp(SECRET, 0, digits=digits)
    assert exc_info.value.status == Status.INVALID_DIGIT_COUNT


@pytest.mark.parametrize("algorithm", ["MD5", "SHA3", "", None, 1])
def test_hotp_invalid_algorithm(algorithm):
    """Test that unsupported algorithms are rejected."""
    with pytest.raises(InvalidHmacAlgorithm) as exc_info:
        generate_hotp(SECRET, 0, algorithm=algorithm)
    assert exc_info.value.status == Status.INVALID_HMAC_ALGORITHM


def test_hotp_algorithm_by_name():
    """Test that algorithms can be selected by name."""
    assert generate_hotp(SECRET, 0, algorithm="sha1") == "755224"
    assert generate_hotp(SECRET, 0, algorithm="SHA-256") == generate_hotp(
        SECRET, 0, algorithm="SHA256"
    )


@pytest.mark.parametrize("counter", [-1, 2**64])
def test_hotp_counter_out_of_range(counter):
    """Test that counters outside 64 bits are rejected."""
    with pytest.raises(ValueError, match="Counter out of range"):
        generate_hotp(SECRET, counter)


def test_hotp_largest_counter():
    """Test that the largest 64-bit counter is accepted."""
    assert len(generate_hotp(SECRET, 2**64 - 1)) == 6


def test_explicit_truncation_offset():
    """Test truncation at a fixed offset."""
    # HMAC for counter 1 is 75a48a19d4cbe100644e8ac1397eea747a2d33ab
    assert generate_hotp(SECRET, 1, truncation=DYNAMIC) == "287082"
    # Dynamic offset for counter 1 is 11
    assert generate_hotp(SECRET, 1, truncation=Explicit(11)) == "287082"
    # Last valid offset for SHA1 is 20 - 4
    assert generate_hotp(SECRET, 1, truncation=Explicit(16)) == "782699"


def test_explicit_truncation_offset_zero():
    """Test that offset 0 is honoured."""
    # HMAC for counter 0 is cc93cf18508d94934c64b65d8ba7667fb7cde4b0
    assert generate_hotp(SECRET, 0, truncation=Explicit(0)) == "755224"
    assert generate_hotp(SECRET, 0, truncation=Explicit(1)) == "339280"


@pytest.mark.parametrize("offset", [-1, 17, 100])
def test_explicit_truncation_out_of_range_falls_back(offset):
    """Test that out of range offsets fall back to dynamic truncation."""
    assert generate_hotp(SECRET, 1, truncation=Explicit(offset)) == "287082"


def test_checksum_digit():
    """Test checksum computation."""
    # 4->8, 2, 2->4, 5, 5->1, 7 sums to 27
    assert checksum_digit(755224, 6) == 3
    assert checksum_digit(0, 6) == 0
    # 9->9 sums to 9
    assert checksum_digit(9, 1) == 1


def test_checksum_leading_zeros():
    """Test that leading zero digits do not change the checksum."""
    assert checksum_digit(42, 2) == checksum_digit(42, 8)


def test_hotp_with_checksum():
    """Test that the checksum digit is appended to the code."""
    code = generate_hotp(SECRET, 0, digits=6, add_checksum=True)
    assert code == "7552243"
    assert _luhn_valid(code)


@pytest.mark.parametrize("counter,expected_code", RFC4226_TEST_VECTORS)
def test_hotp_checksum_round_trip(counter, expected_code):
    """Test that recomputing the checksum over the code yields the same digit."""
    code = generate_hotp(SECRET, counter, digits=6, add_checksum=True)
    assert code[:-1] == expected_code
    assert checksum_digit(int(code[:-1]), 6) == int(code[-1])
    assert _luhn_valid(code)


def test_hotp_counter_increment():
    """Test that different counters produce different codes."""
    codes = [generate_hotp(SECRET, counter) for counter in range(3)]
    assert len(set(codes)) == 3


@pytest.mark.parametrize("counter", [0, 1, 5, 1000, 2**32, 2**64 - 1])
def test_validate_self_consistency(counter):
    """Test that a generated code validates at position 0."""
    code = generate_hotp(SECRET, counter)
    assert validate_hotp(SECRET, counter, 0, code) == 0


def test_validate_within_window():
    """Test that codes ahead of the counter are found."""
    # 162583 is the code for counter 7
    assert validate_hotp(SECRET, 3, 10, "162583") == 4
    assert validate_hotp(SECRET, 3, 4, "162583") == 4


def test_validate_outside_window():
    """Test that codes beyond the window are rejected."""
    assert validate_hotp(SECRET, 3, 2, "162583") is None
    assert validate_hotp(SECRET, 3, 3, "162583") is None


def test_validate_past_code_rejected():
    """Test that codes behind the start counter are not accepted."""
    assert validate_hotp(SECRET, 1, 10, "755224") is None


def test_validate_window_zero():
    """Test that a window of 0 checks the start counter only."""
    assert validate_hotp(SECRET, 0, 0, "755224") == 0
    assert validate_hotp(SECRET, 0, 0, "287082") is None


@pytest.mark.parametrize("counter,expected_code", RFC4226_TEST_VECTORS)
def test_validate_returns_smallest_position(counter, expected_code):
    """Test that the position of the first matching counter is returned."""
    assert validate_hotp(SECRET, 0, 9, expected_code) == counter


def test_validate_wrong_code():
    """Test that a code not in the window is rejected."""
    assert validate_hotp(SECRET, 0, 9, "000000") is None


@pytest.mark.parametrize("candidate", ["", "123456789"])
def test_validate_invalid_length_fails_fast(candidate):
    """Test that generator errors are raised, not reported as a mismatch."""
    with pytest.raises(InvalidDigitCount):
        validate_hotp(SECRET, 0, 5, candidate)


def test_validate_invalid_algorithm_fails_fast():
    """Test that algorithm errors are raised, not reported as a mismatch."""
    with pytest.raises(InvalidHmacAlgorithm):
        validate_hotp(SECRET, 0, 5, "755224", algorithm="MD5")


def test_validate_negative_window():
    """Test that negative windows are rejected."""
    with pytest.raises(ValueError, match="Window"):
        validate_hotp(SECRET, 0, -1, "755224")


def test_validate_shorter_code():
    """Test that the digit count is taken from the candidate."""
    assert validate_hotp(SECRET, 0, 3, "969429"[-4:]) == 3


def test_validate_stops_at_last_counter():
    """Test that the window does not run past the largest counter."""
    last = 2**64 - 1
    code = generate_hotp(SECRET, last)
    assert validate_hotp(SECRET, last - 1, 5, code) == 1


def _truncate_at(digest: bytes, offset: int, digits: int = 6) -> str:
    value = int.from_bytes(digest[offset:offset + 4], "big") & 0x7FFFFFFF
    return f"{value % 10**digits:0{digits}d}"


@pytest.mark.parametrize("algorithm,last_offset", [(SHA256, 28), (SHA512, 60)])
def test_explicit_truncation_bound_follows_digest_size(algorithm, last_offset):
    """Test that the last valid offset depends on the HMAC output size."""
    digest = algorithm.digest(SECRET, (1).to_bytes(8, "big"))
    dynamic_code = generate_hotp(SECRET, 1, algorithm=algorithm)

    assert generate_hotp(
        SECRET, 1, truncation=Explicit(last_offset), algorithm=algorithm
    ) == _truncate_at(digest, last_offset)
    assert (
        generate_hotp(SECRET, 1, truncation=Explicit(last_offset + 1), algorithm=algorithm)
        == dynamic_code
    )
    assert dynamic_code == _truncate_at(digest, digest[-1] & 0x0F)


@pytest.mark.parametrize("offset", [1.5, "3", None])
def test_explicit_truncation_non_integer_falls_back(offset):
    """Test that non-integer offsets fall back to dynamic truncation."""
    assert generate_hotp(SECRET, 1, truncation=Explicit(offset)) == "287082"


def test_hotp_text_secret_is_decoded():
    """Test that plain-text secrets must be given as bytes."""
    assert generate_hotp(b"12345678901234567890", 0) == "755224"
    # Decoded as Base64, giving a different key
    assert generate_hotp("12345678901234567890", 0) == "001918"


@pytest.mark.parametrize("counter", [2**64, 2**64 + 5, -1])
def test_validate_counter_out_of_range(counter):
    """Test that an out of range start counter is an error, not a mismatch."""
    with pytest.raises(ValueError, match="Counter out of range"):
        validate_hotp(SECRET, counter, 0, "755224")
