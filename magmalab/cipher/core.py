"""Magma round function and 64-bit block transform.

Byte-order convention: a block is 8 bytes; its low half is bytes 0..3 read as
a little-endian 32-bit word and its high half is bytes 4..7, also
little-endian. This is the layout of the GOST R 34.13-2015 test vectors as
they are written byte by byte.
"""
from __future__ import annotations

from typing import Sequence

from .errors import InvalidArgumentError
from .key_schedule import ROUNDS, decryption_key_index, encryption_key_index
from .sbox import NUM_SBOXES, SubstitutionTable

BLOCK_SIZE = 8
HALF_SIZE = 4
MASK32 = 0xFFFFFFFF
ROTATION = 11


# ============================================================================
# ACCESSORS
# ============================================================================

def get_nibble(word: int, n: int) -> int:
    """Nibble ``n`` of a 32-bit word, 0 being the least significant."""
    return (word >> (4 * n)) & 0xF


def set_nibble(word: int, n: int, value: int) -> int:
    shift = 4 * n
    return (word & ~(0xF << shift) & MASK32) | ((value & 0xF) << shift)


def get_half(block: bytes, index: int) -> int:
    """Half 0 (low) or 1 (high) of an 8-byte block as a 32-bit word."""
    if index not in (0, 1):
        raise IndexError("half index must be 0 or 1")
    start = HALF_SIZE * index
    return int.from_bytes(block[start:start + HALF_SIZE], "little")


def set_half(block: bytearray, index: int, word: int) -> None:
    if index not in (0, 1):
        raise IndexError("half index must be 0 or 1")
    start = HALF_SIZE * index
    block[start:start + HALF_SIZE] = (word & MASK32).to_bytes(HALF_SIZE, "little")


def rotate_left(x: int, r: int, w: int = 32) -> int:
    """Rotate-left x by r bits in a w-bit word."""
    mask = (1 << w) - 1
    r %= w
    x &= mask
    return ((x << r) & mask) | (x >> (w - r))


# ============================================================================
# ROUND FUNCTION
# ============================================================================

def substitute(word: int, table: SubstitutionTable) -> int:
    out = 0
    for n in range(NUM_SBOXES):
        out = set_nibble(out, n, table.substitute(n, get_nibble(word, n)))
    return out


def round_function(half: int, round_key: int, table: SubstitutionTable) -> int:
    """g[k](a) = rotl11(S(a + k mod 2^32))."""
    t = (half + round_key) & MASK32
    return rotate_left(substitute(t, table), ROTATION)


def _check_block(block) -> bytes:
    if block is None:
        raise InvalidArgumentError("Block is required")
    if not isinstance(block, (bytes, bytearray, memoryview)):
        raise InvalidArgumentError(f"Block must be bytes-like, got {type(block).__name__}")
    block = bytes(block)
    if len(block) != BLOCK_SIZE:
        raise InvalidArgumentError(f"Block must be exactly {BLOCK_SIZE} bytes, got {len(block)}")
    return block


def _transform(block: bytes, round_keys: Sequence[int], table: SubstitutionTable, select) -> bytes:
    low = get_half(block, 0)
    high = get_half(block, 1)

    for r in range(ROUNDS):
        t = round_function(low, round_keys[select(r)], table) ^ high
        if r < ROUNDS - 1:
            high, low = low, t
        else:
            # the last round keeps the halves in place
            high = t

    out = bytearray(BLOCK_SIZE)
    set_half(out, 0, low)
    set_half(out, 1, high)
    return bytes(out)


# ============================================================================
# BLOCK TRANSFORM
# ============================================================================

def encrypt_block(block: bytes, round_keys: Sequence[int], table: SubstitutionTable) -> bytes:
    """Encrypt one 8-byte block with 32 Feistel rounds.

    Args:
        block: 8-byte plaintext block.
        round_keys: The 8 round-key words from ``derive_round_keys``.
        table: Substitution table.

    Returns:
        The 8-byte ciphertext block.
    """
    return _transform(_check_block(block), round_keys, table, encryption_key_index)


def decrypt_block(block: bytes, round_keys: Sequence[int], table: SubstitutionTable) -> bytes:
    """Inverse of ``encrypt_block``: same rounds, mirrored key order."""
    return _transform(_check_block(block), round_keys, table, decryption_key_index)
