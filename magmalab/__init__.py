"""
magmalab - GOST R 34.12-2015 "Magma" block cipher library

Implements the 64-bit Feistel block cipher of GOST R 34.12-2015 (formerly
GOST 28147-89) with the ECB and CTR modes of GOST R 34.13-2015, plus a small
evaluation toolkit (round-trip checks, avalanche and S-box analysis).

Key Features:
- Validated substitution tables with named parameter sets
- Explicit little-endian block layout matching the standard's test vectors
- Typed errors instead of boolean status codes
- Declarative pydantic configuration

Research / education only. Not a substitute for an audited implementation.
"""

from .cipher import CipherContext, MagmaSpec, build_context

__version__ = '0.1.0'

__all__ = ['CipherContext', 'MagmaSpec', 'build_context', '__version__']
