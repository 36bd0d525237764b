from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from magmalab.config import Settings, load_settings


def _clean_hex(v: str) -> str:
    v = "".join(v.split()).lower()
    if v.startswith("0x"):
        v = v[2:]
    try:
        bytes.fromhex(v)
    except ValueError as exc:
        raise ValueError("must be a hex string") from exc
    return v


class MagmaSpec(BaseModel):
    """Declarative configuration of a Magma cipher context.

    Hex values are written byte by byte in buffer order (the order the
    GOST R 34.13-2015 test vectors use in this library), whitespace allowed.
    """

    name: str = Field(default="magma", min_length=1, max_length=80)
    key_hex: str = Field(..., description="32-byte key as 64 hex characters")
    sbox: Optional[str] = Field(default=None, description="Registered substitution table name; Settings.default_sbox when omitted")
    iv_hex: Optional[str] = Field(default=None, description="4-byte CTR IV as 8 hex characters")
    gamma_period: Optional[int] = Field(default=None, ge=1, le=8, description="Settings.gamma_period when omitted")
    seed: Optional[int] = Field(default=None, description="Seed for randomized evaluation runs; Settings.global_seed when omitted")

    @field_validator("key_hex")
    @classmethod
    def _key_hex(cls, v: str) -> str:
        v = _clean_hex(v)
        if len(v) != 64:
            raise ValueError("key_hex must encode exactly 32 bytes")
        return v

    @field_validator("iv_hex")
    @classmethod
    def _iv_hex(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = _clean_hex(v)
        if len(v) != 8:
            raise ValueError("iv_hex must encode exactly 4 bytes")
        return v

    @property
    def key(self) -> bytes:
        return bytes.fromhex(self.key_hex)

    @property
    def iv(self) -> Optional[bytes]:
        return bytes.fromhex(self.iv_hex) if self.iv_hex is not None else None

    def with_defaults(self, settings: Optional[Settings] = None) -> "MagmaSpec":
        """Return a copy with omitted fields taken from ``settings``."""
        settings = settings or load_settings()
        return self.model_copy(update={
            "sbox": self.sbox if self.sbox is not None else settings.default_sbox,
            "gamma_period": self.gamma_period if self.gamma_period is not None else settings.gamma_period,
            "seed": self.seed if self.seed is not None else settings.global_seed,
        })
