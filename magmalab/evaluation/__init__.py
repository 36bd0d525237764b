"""Deterministic cryptographic evaluation of the Magma cipher.

Provides algebraic unit testing (roundtrip verification) and statistical
analysis (SAC, DDT/LAT) of configured contexts and substitution tables.
"""

from .roundtrip import RoundtripResult, RoundtripFailure, run_roundtrip_tests
from .avalanche import SACResult, compute_sac
from .sbox_analysis import SBoxAnalysisResult, analyze_sbox, analyze_table, analyze_all_tables
from .report import EvaluationReport
from .suite import run_evaluation

__all__ = [
    "RoundtripResult",
    "RoundtripFailure",
    "run_roundtrip_tests",
    "SACResult",
    "compute_sac",
    "SBoxAnalysisResult",
    "analyze_sbox",
    "analyze_table",
    "analyze_all_tables",
    "EvaluationReport",
    "run_evaluation",
]
