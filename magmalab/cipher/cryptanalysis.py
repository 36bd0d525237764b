from __future__ import annotations

import random
from typing import Dict, List, Sequence

import numpy as np

from .core import BLOCK_SIZE, encrypt_block
from .key_schedule import KEY_SIZE, derive_round_keys
from .sbox import SubstitutionTable


def _hamming_distance_bytes(a: bytes, b: bytes) -> int:
    if len(a) != len(b):
        raise ValueError("hamming distance length mismatch")
    dist = 0
    for x, y in zip(a, b):
        dist += (x ^ y).bit_count()
    return dist


def _flip_bit(data: bytes, bit_index: int) -> bytes:
    byte_i = bit_index // 8
    bit_i = bit_index % 8
    if byte_i < 0 or byte_i >= len(data):
        raise IndexError("bit_index out of range")
    out = bytearray(data)
    out[byte_i] ^= 1 << bit_i
    return bytes(out)


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


def _encrypt(table: SubstitutionTable, key: bytes, block: bytes) -> bytes:
    return encrypt_block(block, derive_round_keys(key), table)


def avalanche_plaintext(
    table: SubstitutionTable,
    *,
    trials: int = 200,
    flips_per_trial: int = 1,
    seed: int = 1337,
) -> Dict[str, float]:
    rng = random.Random(seed)
    total_frac = 0.0
    total_bits = BLOCK_SIZE * 8
    for _ in range(trials):
        key = _rand_bytes(rng, KEY_SIZE)
        round_keys = derive_round_keys(key)
        pt = _rand_bytes(rng, BLOCK_SIZE)
        ct = encrypt_block(pt, round_keys, table)
        for _ in range(flips_per_trial):
            pt2 = _flip_bit(pt, rng.randrange(0, total_bits))
            ct2 = encrypt_block(pt2, round_keys, table)
            total_frac += _hamming_distance_bytes(ct, ct2) / total_bits
    denom = trials * flips_per_trial
    return {"mean": total_frac / denom if denom else 0.0}


def avalanche_key(
    table: SubstitutionTable,
    *,
    trials: int = 200,
    flips_per_trial: int = 1,
    seed: int = 1337,
) -> Dict[str, float]:
    rng = random.Random(seed + 1)
    total_frac = 0.0
    total_bits = BLOCK_SIZE * 8
    key_bits = KEY_SIZE * 8
    for _ in range(trials):
        key = _rand_bytes(rng, KEY_SIZE)
        pt = _rand_bytes(rng, BLOCK_SIZE)
        ct = _encrypt(table, key, pt)
        for _ in range(flips_per_trial):
            key2 = _flip_bit(key, rng.randrange(0, key_bits))
            ct2 = _encrypt(table, key2, pt)
            total_frac += _hamming_distance_bytes(ct, ct2) / total_bits
    denom = trials * flips_per_trial
    return {"mean": total_frac / denom if denom else 0.0}


def sbox_ddt(sbox: Sequence[int]) -> np.ndarray:
    """Difference distribution table: ddt[dx, dy] = #{x : S(x) ^ S(x ^ dx) == dy}."""
    n = len(sbox)
    if n not in (16, 256):
        raise ValueError("sbox must be 4-bit (16) or 8-bit (256)")
    s = np.asarray(sbox, dtype=np.int64)
    x = np.arange(n)
    ddt = np.zeros((n, n), dtype=np.int64)
    for dx in range(n):
        dy = s[x] ^ s[x ^ dx]
        ddt[dx] = np.bincount(dy, minlength=n)
    return ddt


def _parity(v: np.ndarray) -> np.ndarray:
    p = np.zeros_like(v)
    while np.any(v):
        p ^= v & 1
        v = v >> 1
    return p


def sbox_lat(sbox: Sequence[int]) -> np.ndarray:
    """Walsh-form linear approximation table: lat[a, b] = sum (-1)^(a.x ^ b.S(x))."""
    n = len(sbox)
    if n & (n - 1):
        raise ValueError("sbox size must be power of 2")
    s = np.asarray(sbox, dtype=np.int64)
    x = np.arange(n)
    masks = np.arange(n)
    ax = _parity(masks[:, None] & x[None, :])          # (a, x)
    bs = _parity(masks[:, None] & s[None, :])          # (b, x)
    signs = 1 - 2 * (ax[:, None, :] ^ bs[None, :, :])  # (a, b, x)
    return signs.sum(axis=2)


def sbox_ddt_max(sbox: List[int]) -> int:
    """Return max entry in DDT excluding dx=0 (scaled by counts, not prob)."""
    return int(sbox_ddt(sbox)[1:].max())


def sbox_lat_max_abs(sbox: List[int]) -> int:
    """Return max absolute bias*2^m (Walsh) for non-trivial masks."""
    return int(np.abs(sbox_lat(sbox)[1:, 1:]).max())
