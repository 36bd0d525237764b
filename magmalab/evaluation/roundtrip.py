"""Algebraic unit testing: roundtrip verification P = D(E(P, K), K).

Generates randomized keys, IVs and messages and verifies that ECB and CTR
decryption exactly invert encryption for every vector.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from magmalab.cipher.builder import build_context
from magmalab.cipher.cryptanalysis import _rand_bytes
from magmalab.cipher.errors import MagmaError
from magmalab.cipher.key_schedule import KEY_SIZE
from magmalab.cipher.modes import CTR_IV_SIZE
from magmalab.cipher.sbox import SBoxRegistry
from magmalab.cipher.spec import MagmaSpec
from magmalab.config import Settings

MODES = ("ECB", "CTR")


@dataclass
class RoundtripFailure:
    """Details of a single failed roundtrip test vector."""
    vector_index: int
    mode: str
    plaintext_hex: str
    key_hex: str
    iv_hex: str
    ciphertext_hex: str
    decrypted_hex: str       # What decrypt returned (should equal plaintext)
    error: Optional[str]     # Exception message if decrypt/encrypt threw


@dataclass
class RoundtripResult:
    """Aggregate result of roundtrip testing for one configuration."""
    name: str
    sbox: str
    total_vectors: int
    passed: int
    failed: int
    failures: List[RoundtripFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def success_rate(self) -> float:
        return self.passed / self.total_vectors if self.total_vectors > 0 else 0.0

    @property
    def is_perfect(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] {self.name} ({self.sbox}): "
            f"{self.passed}/{self.total_vectors} vectors passed "
            f"({self.elapsed_seconds:.2f}s)"
        )


def run_roundtrip_tests(
    spec: MagmaSpec,
    *,
    num_vectors: int = 200,
    seed: int = 1337,
    max_blocks: int = 4,
    max_failures_recorded: int = 10,
    registry: Optional[SBoxRegistry] = None,
    settings: Optional[Settings] = None,
) -> RoundtripResult:
    """Run roundtrip verification across random keys, IVs and messages.

    Every vector is checked in both modes: ECB with a random whole number of
    blocks, CTR with a random length that need not be block-aligned. The key
    and IV of ``spec`` are replaced by random ones per vector; the table and
    gamma period are kept.

    Args:
        spec: Cipher configuration to test.
        num_vectors: Number of random vectors (each counts once per mode).
        seed: Random seed for deterministic reproducibility.
        max_blocks: Upper bound on message length, in blocks.
        max_failures_recorded: Maximum number of failure details to keep.
        registry: Optional table registry; uses default if not provided.
        settings: Defaults for fields the spec omits; ``load_settings()`` if not provided.

    Returns:
        RoundtripResult with pass/fail counts and failure details.
    """
    reg = registry or SBoxRegistry()
    spec = spec.with_defaults(settings)
    ctx = build_context(spec, reg, settings)

    rng = random.Random(seed)
    passed = 0
    failed = 0
    failures: List[RoundtripFailure] = []

    start = time.perf_counter()

    for i in range(num_vectors):
        key = _rand_bytes(rng, KEY_SIZE)
        iv = _rand_bytes(rng, CTR_IV_SIZE)
        ctx.set_key(key)
        ctx.set_iv(iv)

        for mode in MODES:
            if mode == "ECB":
                pt = _rand_bytes(rng, 8 * rng.randint(1, max_blocks))
                encrypt, decrypt = ctx.encrypt_ecb, ctx.decrypt_ecb
            else:
                pt = _rand_bytes(rng, rng.randint(1, 8 * max_blocks))
                encrypt, decrypt = ctx.encrypt_ctr, ctx.decrypt_ctr

            try:
                ct = encrypt(pt)
                pt2 = decrypt(ct)
            except MagmaError as exc:
                failed += 1
                if len(failures) < max_failures_recorded:
                    failures.append(RoundtripFailure(
                        vector_index=i,
                        mode=mode,
                        plaintext_hex=pt.hex(),
                        key_hex=key.hex(),
                        iv_hex=iv.hex(),
                        ciphertext_hex="<error>",
                        decrypted_hex="<error>",
                        error=f"{exc.kind.value}: {exc}",
                    ))
                continue

            if pt == pt2:
                passed += 1
            else:
                failed += 1
                if len(failures) < max_failures_recorded:
                    failures.append(RoundtripFailure(
                        vector_index=i,
                        mode=mode,
                        plaintext_hex=pt.hex(),
                        key_hex=key.hex(),
                        iv_hex=iv.hex(),
                        ciphertext_hex=ct.hex(),
                        decrypted_hex=pt2.hex(),
                        error=None,
                    ))

    elapsed = time.perf_counter() - start
    ctx.close()

    return RoundtripResult(
        name=spec.name,
        sbox=spec.sbox,
        total_vectors=num_vectors * len(MODES),
        passed=passed,
        failed=failed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )
