"""Case transfer between a source word and its translation."""

from __future__ import annotations


def _swap_first(target: str, upper: bool) -> str:
    first = target[0].upper() if upper else target[0].lower()
    if len(first) != 1:
        # e.g. 'ß'.upper() == 'SS'; keep the translation as it is
        return target
    return first + target[1:]


def match_case(source: str, target: str) -> str:
    """Give ``target`` the first-letter case of ``source``.

    Only the first letter is transferred, and only when both first
    characters are cased letters of opposite case.

    Example:
        >>> match_case("Hello", "hallo")
        'Hallo'
        >>> match_case("world", "Welt")
        'welt'
    """
    if not source or not target:
        return target
    if source[0].isupper() and target[0].islower():
        return _swap_first(target, upper=True)
    if source[0].islower() and target[0].isupper():
        return _swap_first(target, upper=False)
    return target
