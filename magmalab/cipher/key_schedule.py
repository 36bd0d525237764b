"""Magma key schedule.

The 256-bit key is read as eight little-endian 32-bit words ``w0..w7`` and
stored reversed, so round key ``K[i] = w[7 - i]``. With the byte order used
by the GOST R 34.13-2015 test vectors this makes ``K[0]`` the standard's K1.
"""
from __future__ import annotations

import struct
from typing import List, Tuple

from .errors import InvalidArgumentError

KEY_SIZE = 32
NUM_ROUND_KEYS = 8
ROUNDS = 32


def derive_round_keys(key: bytes) -> Tuple[int, ...]:
    """Split a 32-byte key into the 8 round-key words.

    No key-strength checks are made; every 256-bit value is accepted.
    """
    if key is None:
        raise InvalidArgumentError("Key is required")
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise InvalidArgumentError(f"Key must be bytes-like, got {type(key).__name__}")
    key = bytes(key)
    if len(key) != KEY_SIZE:
        raise InvalidArgumentError(f"Key must be exactly {KEY_SIZE} bytes, got {len(key)}")
    words = struct.unpack("<8I", key)
    return tuple(words[NUM_ROUND_KEYS - i - 1] for i in range(NUM_ROUND_KEYS))


def encryption_key_index(r: int) -> int:
    # K1..K8 three times, then K8..K1
    if r < 24:
        return r % 8
    return 7 - (r % 8)


def decryption_key_index(r: int) -> int:
    # K1..K8 once, then K8..K1 three times
    if r < 8:
        return r % 8
    return 7 - (r % 8)


def expand_round_keys(round_keys: Tuple[int, ...], *, decrypt: bool = False) -> List[int]:
    """Return the 32 per-round key words in the order they are applied."""
    if len(round_keys) != NUM_ROUND_KEYS:
        raise InvalidArgumentError(f"Expected {NUM_ROUND_KEYS} round keys, got {len(round_keys)}")
    select = decryption_key_index if decrypt else encryption_key_index
    return [round_keys[select(r)] for r in range(ROUNDS)]
