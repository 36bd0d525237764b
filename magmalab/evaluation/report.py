"""Structured evaluation report builder.

Aggregates results from roundtrip tests, SAC analysis, and S-box analysis
into a single serializable report.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from .avalanche import SACResult
from .roundtrip import RoundtripResult
from .sbox_analysis import SBoxAnalysisResult


@dataclass
class EvaluationReport:
    """Complete evaluation report aggregating all analysis results."""
    timestamp: str = ""
    roundtrip_results: List[RoundtripResult] = field(default_factory=list)
    sac_results: List[SACResult] = field(default_factory=list)
    sbox_results: List[SBoxAnalysisResult] = field(default_factory=list)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize full report for JSON export."""
        return {
            "timestamp": self.timestamp,
            "roundtrip": [r.to_dict() for r in self.roundtrip_results],
            "sac": [s.to_dict() for s in self.sac_results],
            "sbox": [s.to_dict() for s in self.sbox_results],
            "summary": {
                "roundtrip_all_pass": all(r.is_perfect for r in self.roundtrip_results),
                "sac_all_pass": all(s.passes_sac for s in self.sac_results),
                "sbox_all_bijective": all(s.is_bijective for s in self.sbox_results),
                "failing_configurations": self.failing_configurations(),
            },
        }

    def to_summary(self) -> str:
        """Human-readable summary."""
        lines = [f"Evaluation Report: {self.timestamp}", "=" * 50]

        if self.roundtrip_results:
            rt_pass = sum(1 for r in self.roundtrip_results if r.is_perfect)
            lines.append(f"\nRoundtrip Tests: {rt_pass}/{len(self.roundtrip_results)} configurations pass")
            for r in self.roundtrip_results:
                lines.append(f"  {r.summary()}")

        if self.sac_results:
            sac_pass = sum(1 for s in self.sac_results if s.passes_sac)
            lines.append(f"\nSAC Analysis: {sac_pass}/{len(self.sac_results)} pass")
            for s in self.sac_results:
                lines.append(f"  {s.summary()}")

        if self.sbox_results:
            lines.append(f"\nS-box Analysis: {len(self.sbox_results)} S-boxes")
            for s in self.sbox_results:
                lines.append(f"  {s.summary()}")

        return "\n".join(lines)

    def failing_configurations(self) -> List[str]:
        """Return names of configurations with roundtrip failures."""
        return [r.name for r in self.roundtrip_results if not r.is_perfect]
