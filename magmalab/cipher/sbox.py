"""Substitution tables for the Magma block cipher.

A table is 128 nibble values split into 8 independent 4-bit S-boxes. S-box
``n`` (entries ``16n .. 16n + 15``) substitutes nibble ``n`` of a 32-bit word,
nibble 0 being the least significant one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import InvalidArgumentError, MalformedTableError

logger = logging.getLogger(__name__)

NUM_SBOXES = 8
SBOX_SIZE = 16
TABLE_SIZE = NUM_SBOXES * SBOX_SIZE
_FULL_MASK = 0xFFFF


# ============================================================================
# REFERENCE TABLES
# ============================================================================

# GOST R 34.12-2015 (id-tc26-gost-28147-param-Z)
GOST_R_3412_2015_SBOX: Tuple[int, ...] = (
    0xc, 0x4, 0x6, 0x2, 0xa, 0x5, 0xb, 0x9, 0xe, 0x8, 0xd, 0x7, 0x0, 0x3, 0xf, 0x1,
    0x6, 0x8, 0x2, 0x3, 0x9, 0xa, 0x5, 0xc, 0x1, 0xe, 0x4, 0x7, 0xb, 0xd, 0x0, 0xf,
    0xb, 0x3, 0x5, 0x8, 0x2, 0xf, 0xa, 0xd, 0xe, 0x1, 0x7, 0x4, 0xc, 0x9, 0x6, 0x0,
    0xc, 0x8, 0x2, 0x1, 0xd, 0x4, 0xf, 0x6, 0x7, 0x0, 0xa, 0x5, 0x3, 0xe, 0x9, 0xb,
    0x7, 0xf, 0x5, 0xa, 0x8, 0x1, 0x6, 0xd, 0x0, 0x9, 0x3, 0xe, 0xb, 0x4, 0x2, 0xc,
    0x5, 0xd, 0xf, 0x6, 0x9, 0x2, 0xc, 0xa, 0xb, 0x7, 0x8, 0x1, 0x4, 0x3, 0xe, 0x0,
    0x8, 0xe, 0x2, 0x5, 0x6, 0x9, 0x1, 0xc, 0xf, 0x4, 0xb, 0x0, 0xd, 0xa, 0x3, 0x7,
    0x1, 0x7, 0xe, 0xd, 0x0, 0x5, 0x8, 0x3, 0x4, 0xf, 0xa, 0x6, 0x9, 0xc, 0xb, 0x2,
)

# id-GostR3411-94-TestParamSet (RFC 5831 test vectors)
GOST_R_3411_94_TEST_SBOX: Tuple[int, ...] = (
    4, 10, 9, 2, 13, 8, 0, 14, 6, 11, 1, 12, 7, 15, 5, 3,
    14, 11, 4, 12, 6, 13, 15, 10, 2, 3, 8, 1, 0, 7, 5, 9,
    5, 8, 1, 13, 10, 3, 4, 2, 14, 15, 12, 7, 6, 0, 9, 11,
    7, 13, 10, 1, 0, 8, 9, 15, 14, 4, 6, 12, 11, 2, 5, 3,
    6, 12, 7, 1, 5, 15, 13, 8, 4, 10, 9, 14, 0, 3, 11, 2,
    4, 11, 10, 0, 7, 2, 1, 13, 3, 6, 8, 5, 9, 12, 15, 14,
    13, 11, 4, 1, 3, 15, 5, 9, 0, 10, 14, 7, 6, 8, 2, 12,
    1, 15, 13, 0, 5, 7, 10, 4, 9, 2, 3, 14, 6, 11, 8, 12,
)


# ============================================================================
# VALIDATION
# ============================================================================

def _flatten(table: Sequence) -> List[int]:
    """Accept either 128 flat values or 8 rows of 16 values."""
    if table is None:
        raise InvalidArgumentError("Substitution table is required")
    if isinstance(table, str):
        raise InvalidArgumentError("Substitution table must be a sequence of integers")
    try:
        items = list(table)
    except TypeError as exc:
        raise InvalidArgumentError("Substitution table must be a sequence") from exc

    if len(items) == NUM_SBOXES:
        try:
            rows = [list(row) for row in items]
        except TypeError as exc:
            raise InvalidArgumentError(
                f"Substitution table must hold {TABLE_SIZE} values or {NUM_SBOXES} rows of {SBOX_SIZE}"
            ) from exc
        if any(len(row) != SBOX_SIZE for row in rows):
            raise InvalidArgumentError(f"Every S-box row must hold {SBOX_SIZE} values")
        items = [v for row in rows for v in row]

    if len(items) != TABLE_SIZE:
        raise InvalidArgumentError(
            f"Substitution table must hold {TABLE_SIZE} values (or {NUM_SBOXES} rows of {SBOX_SIZE}), got {len(items)}"
        )
    for v in items:
        if isinstance(v, bool) or not isinstance(v, int):
            raise InvalidArgumentError(f"Substitution table entries must be integers, got {type(v).__name__}")
    return items


def validate_table(table: Sequence) -> Tuple[int, ...]:
    """Check that every 16-entry group is a permutation of 0..15.

    Each group sets one bit per value in a 16-bit presence mask; the group is
    valid only when the mask ends up full. Values outside 0..15 never fill the
    mask and are therefore rejected as well.

    Returns:
        The table as a flat tuple of 128 values.

    Raises:
        InvalidArgumentError: table is missing or has the wrong shape.
        MalformedTableError: some group is not a bijection on nibbles.
    """
    values = _flatten(table)
    for n in range(NUM_SBOXES):
        flags = 0
        for v in values[SBOX_SIZE * n: SBOX_SIZE * (n + 1)]:
            if 0 <= v < SBOX_SIZE:
                flags |= 1 << v
        if flags != _FULL_MASK:
            missing = [x for x in range(SBOX_SIZE) if not (flags >> x) & 1]
            raise MalformedTableError(
                f"S-box {n} is not a permutation of 0..15 (missing {missing})", group=n
            )
    return tuple(values)


def is_valid_table(table: Sequence) -> bool:
    try:
        validate_table(table)
    except (InvalidArgumentError, MalformedTableError):
        return False
    return True


# ============================================================================
# TABLE VALUE
# ============================================================================

@dataclass(frozen=True)
class SubstitutionTable:
    """An immutable, validated set of 8 nibble S-boxes."""
    values: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "values", validate_table(self.values))

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[int]]) -> "SubstitutionTable":
        """Build a table from exactly 8 rows of 16 values."""
        if rows is None:
            raise InvalidArgumentError("Substitution table is required")
        rows = list(rows)
        if len(rows) != NUM_SBOXES:
            raise InvalidArgumentError(f"Expected {NUM_SBOXES} S-box rows, got {len(rows)}")
        return cls(validate_table(rows))

    @classmethod
    def coerce(cls, table) -> "SubstitutionTable":
        if isinstance(table, SubstitutionTable):
            return table
        return cls(validate_table(table))

    def row(self, n: int) -> Tuple[int, ...]:
        if not 0 <= n < NUM_SBOXES:
            raise IndexError(f"S-box index must be 0..{NUM_SBOXES - 1}")
        return self.values[SBOX_SIZE * n: SBOX_SIZE * (n + 1)]

    def rows(self) -> List[Tuple[int, ...]]:
        return [self.row(n) for n in range(NUM_SBOXES)]

    def substitute(self, n: int, nibble: int) -> int:
        """Apply S-box ``n`` to a single nibble."""
        return self.values[SBOX_SIZE * n + (nibble & 0xF)]

    def inverse_rows(self) -> List[Tuple[int, ...]]:
        out = []
        for row in self.rows():
            inv = [0] * SBOX_SIZE
            for i, v in enumerate(row):
                inv[v] = i
            out.append(tuple(inv))
        return out


# ============================================================================
# NAMED PARAMETER SETS
# ============================================================================

def builtin_tables() -> Dict[str, SubstitutionTable]:
    """Return all built-in substitution tables keyed by name."""
    return {
        "tc26-z": SubstitutionTable(GOST_R_3412_2015_SBOX),
        "gostr3411-94-test": SubstitutionTable(GOST_R_3411_94_TEST_SBOX),
    }


class SBoxRegistry:
    """Registry of named substitution tables."""

    def __init__(self):
        self._tables: Dict[str, SubstitutionTable] = builtin_tables()

    def get(self, name: str) -> SubstitutionTable:
        if name not in self._tables:
            raise KeyError(f"Unknown substitution table: {name}")
        return self._tables[name]

    def exists(self, name: str) -> bool:
        return name in self._tables

    def list_names(self) -> List[str]:
        return sorted(self._tables.keys())

    def register(self, name: str, table) -> SubstitutionTable:
        """Register a custom table; invalid tables are rejected."""
        try:
            value = SubstitutionTable.coerce(table)
        except MalformedTableError:
            logger.warning("Rejected substitution table %r", name)
            raise
        self._tables[name] = value
        return value
