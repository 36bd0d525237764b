"""
Cipher Package

GOST R 34.12-2015 64-bit block cipher ("Magma"): substitution tables, key
schedule, block transform and the ECB / CTR modes of GOST R 34.13-2015.
"""

from .context import CipherContext
from .errors import (
    BadLengthError,
    ErrorKind,
    GammaPeriodError,
    InvalidArgumentError,
    MagmaError,
    MalformedTableError,
    UnsetConfigurationError,
)
from .sbox import GOST_R_3412_2015_SBOX, SBoxRegistry, SubstitutionTable, validate_table
from .spec import MagmaSpec
from .builder import build_context

__all__ = [
    "CipherContext",
    "MagmaSpec",
    "build_context",
    "SubstitutionTable",
    "SBoxRegistry",
    "GOST_R_3412_2015_SBOX",
    "validate_table",
    "ErrorKind",
    "MagmaError",
    "InvalidArgumentError",
    "MalformedTableError",
    "BadLengthError",
    "GammaPeriodError",
    "UnsetConfigurationError",
]
