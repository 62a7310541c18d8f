"""
Stream-wide stages: lower-casing, position repair and deduplication.

These stages see the whole materialized stream at once, unlike the per-token
expansion stages.
"""
from __future__ import annotations

from collections.abc import Iterable

from namexpand.types import Token


class LowercaseFilter:
    """Lower-case every token's text."""

    def apply(self, tokens: Iterable[Token]) -> tuple[Token, ...]:
        out: list[Token] = []
        for token in tokens:
            lowered = token.text.lower()
            out.append(token if lowered == token.text else token.with_text(lowered))
        return tuple(out)


class PositionRepair:
    """
    Collapse the expanded stream onto one position.

    Every token after the first gets position increment 0, so the stream reads
    as alternatives at a single position and never as a phrase. The first
    token keeps its own increment.
    """

    def apply(self, tokens: Iterable[Token]) -> tuple[Token, ...]:
        out: list[Token] = []
        for index, token in enumerate(tokens):
            if index and token.position_increment:
                token = token.with_position_increment(0)
            out.append(token)
        return tuple(out)


class Deduplicator:
    """
    Drop tokens equal (text and type) to an earlier token.

    First occurrences keep their order and position increment. Idempotent.
    """

    def apply(self, tokens: Iterable[Token]) -> tuple[Token, ...]:
        seen: set[tuple[str, object]] = set()
        out: list[Token] = []
        for token in tokens:
            key = (token.text, token.type)
            if key in seen:
                continue
            seen.add(key)
            out.append(token)
        return tuple(out)
