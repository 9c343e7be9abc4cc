"""Status codes and exceptions for OTP generation and validation."""

import enum


class Status(enum.IntEnum):
    """Outcome of an OTP operation. Failures are negative."""

    OK = 0
    INVALID_DIGIT_COUNT = -1
    FORMAT_ERROR = -2
    INVALID_OTP = -3
    INVALID_HMAC_ALGORITHM = -4


class OtpError(ValueError):
    """Base class for errors raised while generating an OTP."""

    status = Status.FORMAT_ERROR


class InvalidDigitCount(OtpError):
    """The requested number of digits is not supported."""

    status = Status.INVALID_DIGIT_COUNT


class InvalidHmacAlgorithm(OtpError):
    """The requested HMAC algorithm is not implemented."""

    status = Status.INVALID_HMAC_ALGORITHM


class FormatError(OtpError):
    """The formatted code does not have the expected length."""

    status = Status.FORMAT_ERROR
