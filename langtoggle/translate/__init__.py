"""
Translation passes for langtoggle.

This module provides:
- translate_to_target: original -> target, filling the mapping store
- translate_to_original: target -> original, reading the mapping store
- match_case: first-letter case transfer
"""

from langtoggle.translate.casing import match_case
from langtoggle.translate.forward import ForwardResult, translate_to_target
from langtoggle.translate.backward import resolve_token, translate_to_original

__all__ = [
    "ForwardResult",
    "match_case",
    "resolve_token",
    "translate_to_original",
    "translate_to_target",
]
