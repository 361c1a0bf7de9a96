"""Fuzzy matching used by filterable tables."""

from __future__ import annotations

from collections.abc import Iterable


def matches(text: str, query: str) -> bool:
    """Case-insensitive subsequence match ("dbpw" matches "database-password")."""
    if not query:
        return True
    it = iter(text.lower())
    return all(ch in it for ch in query.lower())


def matches_any(texts: Iterable[str], query: str) -> bool:
    return any(matches(t, query) for t in texts)
