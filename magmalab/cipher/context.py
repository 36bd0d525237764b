"""Cipher context: the configured state behind every Magma operation.

A context starts unset and is configured through ``set_sbox``, ``set_key``,
``set_iv`` and ``set_gamma_period`` in any order. It is meant for a single
owner; share it across threads only behind an external lock.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from . import core, modes
from .errors import (
    GammaPeriodError,
    InvalidArgumentError,
    UnsetConfigurationError,
)
from .key_schedule import derive_round_keys
from .sbox import SBoxRegistry, SubstitutionTable

logger = logging.getLogger(__name__)

MIN_GAMMA_PERIOD = 1
MAX_GAMMA_PERIOD = 8


class CipherContext:
    """GOST R 34.12-2015 64-bit block cipher ("Magma") with ECB and CTR modes.

    Example:
        >>> ctx = CipherContext(sbox="tc26-z", key=key, iv=b"\\x78\\x56\\x34\\x12", gamma_period=8)
        >>> ct = ctx.encrypt_ctr(b"attack at dawn")
        >>> ctx.decrypt_ctr(ct)
        b'attack at dawn'
    """

    def __init__(
        self,
        *,
        sbox=None,
        key: Optional[bytes] = None,
        iv: Optional[bytes] = None,
        gamma_period: Optional[int] = None,
        registry: Optional[SBoxRegistry] = None,
    ):
        self._registry = registry
        self._table: Optional[SubstitutionTable] = None
        self._round_keys: Optional[Tuple[int, ...]] = None
        self._iv: bytes = b""
        self._gamma_period: Optional[int] = None

        if sbox is not None:
            self.set_sbox(sbox)
        if key is not None:
            self.set_key(key)
        if iv is not None:
            self.set_iv(iv)
        if gamma_period is not None:
            self.set_gamma_period(gamma_period)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_sbox(self, table) -> None:
        """Install a substitution table.

        ``table`` may be a ``SubstitutionTable``, 128 flat values, 8 rows of
        16 values, or the name of a registered parameter set. An invalid
        table raises and leaves the current table in place.
        """
        if isinstance(table, str):
            reg = self._registry or SBoxRegistry()
            try:
                value = reg.get(table)
            except KeyError as exc:
                raise InvalidArgumentError(str(exc)) from exc
        else:
            value = SubstitutionTable.coerce(table)
        self._table = value
        logger.debug("Substitution table set")

    def set_key(self, key: bytes) -> None:
        """Derive the 8 round keys from a 32-byte key."""
        self._round_keys = derive_round_keys(key)
        logger.debug("Key set")

    def set_iv(self, iv: bytes) -> None:
        """Store a copy of the IV; the previous one is dropped."""
        if iv is None:
            raise InvalidArgumentError("IV is required")
        if not isinstance(iv, (bytes, bytearray, memoryview)):
            raise InvalidArgumentError(f"IV must be bytes-like, got {type(iv).__name__}")
        self._iv = bytes(iv)
        logger.debug("IV set (%d bytes)", len(self._iv))

    def set_gamma_period(self, period: int) -> None:
        """Record the gamma period in bytes (1..8)."""
        if isinstance(period, bool) or not isinstance(period, int):
            raise InvalidArgumentError(f"Gamma period must be an integer, got {type(period).__name__}")
        if not MIN_GAMMA_PERIOD <= period <= MAX_GAMMA_PERIOD:
            raise GammaPeriodError(
                f"Gamma period must be in {MIN_GAMMA_PERIOD}..{MAX_GAMMA_PERIOD}, got {period}"
            )
        self._gamma_period = period
        logger.debug("Gamma period set to %d", period)

    def close(self) -> None:
        """Release the IV buffer. The context can be reconfigured afterwards."""
        self._iv = b""

    def __enter__(self) -> "CipherContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def sbox(self) -> Optional[SubstitutionTable]:
        return self._table

    @property
    def round_keys(self) -> Optional[Tuple[int, ...]]:
        return self._round_keys

    @property
    def iv(self) -> bytes:
        return self._iv

    @property
    def iv_length(self) -> int:
        return len(self._iv)

    @property
    def gamma_period(self) -> Optional[int]:
        return self._gamma_period

    def __repr__(self) -> str:
        return (
            f"CipherContext(sbox={'set' if self._table else 'unset'}, "
            f"key={'set' if self._round_keys else 'unset'}, "
            f"iv_length={self.iv_length}, gamma_period={self._gamma_period})"
        )

    def _block_config(self) -> Tuple[Tuple[int, ...], SubstitutionTable]:
        if self._table is None:
            raise UnsetConfigurationError("Substitution table is not set")
        if self._round_keys is None:
            raise UnsetConfigurationError("Key is not set")
        return self._round_keys, self._table

    def _ctr_iv(self) -> bytes:
        if self._gamma_period is None:
            raise UnsetConfigurationError("Gamma period is not set")
        if not self._iv:
            raise UnsetConfigurationError("IV is not set")
        return self._iv

    # ------------------------------------------------------------------
    # Block transform
    # ------------------------------------------------------------------

    def encrypt_block(self, block: bytes) -> bytes:
        round_keys, table = self._block_config()
        return core.encrypt_block(block, round_keys, table)

    def decrypt_block(self, block: bytes) -> bytes:
        round_keys, table = self._block_config()
        return core.decrypt_block(block, round_keys, table)

    # ------------------------------------------------------------------
    # ECB
    # ------------------------------------------------------------------

    def encrypt_ecb(self, data, out=None) -> bytes:
        """Encrypt a buffer whose length is a positive multiple of 8 in ECB mode."""
        self._block_config()
        return modes.ecb_transform(data, self.encrypt_block, out)

    def decrypt_ecb(self, data, out=None) -> bytes:
        self._block_config()
        return modes.ecb_transform(data, self.decrypt_block, out)

    # ------------------------------------------------------------------
    # CTR
    # ------------------------------------------------------------------

    def encrypt_ctr(self, data, out=None) -> bytes:
        """XOR ``data`` with the counter-mode gamma.

        The counter is re-seeded from the IV on every call, so the same
        context decrypts what it encrypted.
        """
        self._block_config()
        iv = self._ctr_iv()
        return modes.ctr_transform(data, iv, self.encrypt_block, out)

    def decrypt_ctr(self, data, out=None) -> bytes:
        return self.encrypt_ctr(data, out)

    def keystream(self, length: int) -> bytes:
        """Return the first ``length`` gamma bytes for the current IV."""
        self._block_config()
        iv = self._ctr_iv()
        return modes.ctr_keystream(length, iv, self.encrypt_block)
