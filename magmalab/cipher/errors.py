"""Error types raised by the Magma cipher context and its modes.

Every failure carries an ``ErrorKind`` so callers can tell a caller bug
(invalid argument) from a configuration problem without parsing messages.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    MALFORMED_TABLE = "malformed_table"
    BAD_LENGTH = "bad_length"
    BAD_GAMMA_PERIOD = "bad_gamma_period"
    UNSET_CONFIGURATION = "unset_configuration"


class MagmaError(ValueError):
    """Base class for all cipher errors."""

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT


class InvalidArgumentError(MagmaError):
    kind = ErrorKind.INVALID_ARGUMENT


class MalformedTableError(MagmaError):
    """A substitution table group is not a permutation of 0..15."""

    kind = ErrorKind.MALFORMED_TABLE

    def __init__(self, message: str, group: int | None = None):
        super().__init__(message)
        self.group = group


class BadLengthError(MagmaError):
    kind = ErrorKind.BAD_LENGTH


class GammaPeriodError(MagmaError):
    kind = ErrorKind.BAD_GAMMA_PERIOD


class UnsetConfigurationError(MagmaError):
    kind = ErrorKind.UNSET_CONFIGURATION
