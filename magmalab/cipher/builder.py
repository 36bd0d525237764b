from __future__ import annotations

from typing import Optional

from magmalab.config import Settings

from .context import CipherContext
from .errors import InvalidArgumentError
from .sbox import SBoxRegistry
from .spec import MagmaSpec


def build_context(
    spec: MagmaSpec,
    registry: Optional[SBoxRegistry] = None,
    settings: Optional[Settings] = None,
) -> CipherContext:
    """Build a configured context; fields the spec omits come from ``settings``."""
    reg = registry or SBoxRegistry()
    spec = spec.with_defaults(settings)

    if not reg.exists(spec.sbox):
        raise InvalidArgumentError(f"Unknown substitution table: {spec.sbox}")

    ctx = CipherContext(registry=reg)
    ctx.set_sbox(reg.get(spec.sbox))
    ctx.set_key(spec.key)
    ctx.set_gamma_period(spec.gamma_period)
    if spec.iv is not None:
        ctx.set_iv(spec.iv)
    return ctx
