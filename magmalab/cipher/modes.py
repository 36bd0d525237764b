"""ECB and CTR modes of operation (GOST R 34.13-2015) over byte buffers.

Both modes validate their whole input before producing any output, so a
caller-supplied ``out`` buffer is never partially written.
"""
from __future__ import annotations

from typing import Callable

from .core import BLOCK_SIZE
from .errors import BadLengthError, InvalidArgumentError

BlockFn = Callable[[bytes], bytes]

CTR_IV_SIZE = 4
MASK64 = 0xFFFFFFFFFFFFFFFF


def _as_bytes(data, what: str = "Data") -> bytes:
    if data is None:
        raise InvalidArgumentError(f"{what} is required")
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidArgumentError(f"{what} must be bytes-like, got {type(data).__name__}")
    return bytes(data)


def _check_out(out, length: int) -> None:
    if out is None:
        return
    if not isinstance(out, (bytearray, memoryview)) or (isinstance(out, memoryview) and out.readonly):
        raise InvalidArgumentError("Output buffer must be a writable bytearray or memoryview")
    if len(out) != length:
        raise BadLengthError(f"Output buffer must be {length} bytes, got {len(out)}")


def _emit(result: bytearray, out) -> bytes:
    if out is not None:
        out[:] = result
    return bytes(result)


# ============================================================================
# ECB
# ============================================================================

def ecb_transform(data, block_fn: BlockFn, out=None) -> bytes:
    """Apply ``block_fn`` to every 8-byte block independently.

    Args:
        data: Input buffer; length must be a positive multiple of 8.
        block_fn: Block encryption or decryption function.
        out: Optional writable buffer of the same length; may be ``data``.

    Returns:
        The transformed buffer as bytes.
    """
    src = _as_bytes(data)
    if len(src) == 0 or len(src) % BLOCK_SIZE != 0:
        raise BadLengthError(
            f"ECB input length must be a positive multiple of {BLOCK_SIZE}, got {len(src)}"
        )
    _check_out(out, len(src))

    result = bytearray(len(src))
    for i in range(0, len(src), BLOCK_SIZE):
        result[i:i + BLOCK_SIZE] = block_fn(src[i:i + BLOCK_SIZE])
    return _emit(result, out)


# ============================================================================
# CTR
# ============================================================================

def initial_counter(iv: bytes) -> int:
    """Counter block ``00 00 00 00 || IV`` read as a little-endian integer.

    In the standard's big-endian notation this is ``CTR_1 = IV || 0^32``.
    """
    iv = _as_bytes(iv, "IV")
    if len(iv) != CTR_IV_SIZE:
        raise BadLengthError(f"CTR requires a {CTR_IV_SIZE}-byte IV, got {len(iv)}")
    return int.from_bytes(bytes(BLOCK_SIZE - CTR_IV_SIZE) + iv, "little")


def ctr_keystream(length: int, iv: bytes, block_fn: BlockFn) -> bytes:
    """Generate ``length`` gamma bytes, one encrypted counter per 8 bytes."""
    if length <= 0:
        raise BadLengthError(f"Keystream length must be positive, got {length}")
    counter = initial_counter(iv)
    stream = bytearray()
    while len(stream) < length:
        stream += block_fn(counter.to_bytes(BLOCK_SIZE, "little"))
        counter = (counter + 1) & MASK64
    return bytes(stream[:length])


def ctr_transform(data, iv: bytes, block_fn: BlockFn, out=None) -> bytes:
    """XOR ``data`` with the CTR gamma; encryption and decryption are identical."""
    src = _as_bytes(data)
    if len(src) == 0:
        raise BadLengthError("CTR input must not be empty")
    _check_out(out, len(src))

    gamma = ctr_keystream(len(src), iv, block_fn)
    result = bytearray(s ^ g for s, g in zip(src, gamma))
    return _emit(result, out)


def ctr_counter_block(iv: bytes, index: int) -> bytes:
    """Counter block used for the ``index``-th gamma block (0-based)."""
    if index < 0:
        raise InvalidArgumentError("Counter index must be non-negative")
    counter = (initial_counter(iv) + index) & MASK64
    return counter.to_bytes(BLOCK_SIZE, "little")

