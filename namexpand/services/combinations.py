"""
Name combination service for author-name expansion.

This module generates the truncated and wildcarded renderings of a parsed
name that let "Ortiz, David A" match records indexed as "Ortiz, D",
"Ortiz, David" or "Ortiz, David Alan".

Wildcard convention (see the query builder): a trailing "*" turns a term
into a prefix match.
- "ortiz, d a*"    truncated final part: any part starting with "a", more parts allowed
- "ortiz, david *" complete final part: the name as given plus further parts
"""
from __future__ import annotations

from collections.abc import Callable, Iterable

from namexpand.types import ExpansionConfig, GivenPart, ParsedName, Token, TokenType

# Token types the generator decomposes. COMBINATION output is never recombined.
_COMBINABLE_TYPES = frozenset({TokenType.PLAIN, TokenType.TRANSLITERATED, TokenType.SYNONYM})


class NameCombinationGenerator:
    """Service for generating name combinations from parsed names."""

    def __init__(self, config: ExpansionConfig, normalizer):
        self._config = config
        self._normalizer = normalizer

    def generate(self, name: ParsedName) -> tuple[str, ...]:
        """
        Ordered, distinct combinations of `name`, excluding the name itself.

        1. "surname," (bare surname) unless disabled
        2. prefixes k = 1..n-1: every rendering of parts 1..k, exact terms
        3. k = n: every rendering of all parts; the final part carries the
           wildcard ("a*" when truncated, "david *" when complete)
        4. optional fused initials ("ortiz, da*")

        A truncated part only ever renders as itself.
        """
        out = _BoundedOrderedSet(self._config.max_combinations, exclude=name.render())
        surname = name.surname
        parts = name.given_parts
        wildcards = self._config.add_wildcards

        if not parts:
            if self._config.bare_surname_prefix and wildcards:
                out.add(f"{surname}, *")
            return out.items()

        if len(parts) < self._config.min_given_parts:
            return out.items()

        if self._config.plain_surname:
            out.add(f"{surname},")

        prefixes = [""]
        for k, part in enumerate(parts, 1):
            renderings = self._renderings(part)

            if k < len(parts):
                next_prefixes = []
                for prefix in prefixes:
                    for rendering in renderings:
                        rendered = f"{prefix} {rendering}".lstrip()
                        out.add(f"{surname}, {rendered}")
                        next_prefixes.append(rendered)
                prefixes = next_prefixes[: self._config.max_combinations]
                continue

            for prefix in prefixes:
                for rendering in renderings:
                    rendered = f"{prefix} {rendering}".lstrip()
                    if part.truncated:
                        out.add(f"{surname}, {rendered}*" if wildcards else f"{surname}, {rendered}")
                    else:
                        out.add(f"{surname}, {rendered}")
                        if wildcards:
                            out.add(f"{surname}, {rendered} *")

        if self._config.add_shortened_multi_name and len(parts) > 1:
            fused = "".join(part.initial.replace("-", "") for part in parts)
            out.add(f"{surname}, {fused}*" if wildcards else f"{surname}, {fused}")

        return out.items()

    def _renderings(self, part: GivenPart) -> tuple[str, ...]:
        if part.truncated:
            return (part.text,)
        initial = part.initial
        return (initial, part.text) if initial != part.text else (part.text,)

    def combine(self, token: Token, origin: str) -> tuple[Token, ...]:
        """COMBINATION tokens for one stream token; empty for partial or wildcard tokens."""
        if token.type not in _COMBINABLE_TYPES or token.partial or token.is_wildcard:
            return ()
        name = self._normalizer.parse_or_surname(token.text)
        return tuple(token.derive(text, TokenType.COMBINATION, origin) for text in self.generate(name))

    def expand(
        self,
        tokens: Iterable[Token],
        origin: str,
        select: Callable[[Token], bool] | None = None,
    ) -> tuple[Token, ...]:
        """Insert each selected token's combinations right after it."""
        out: list[Token] = []
        for token in tokens:
            out.append(token)
            if select is None or select(token):
                out.extend(self.combine(token, origin))
        return tuple(out)


class _BoundedOrderedSet:
    """Insertion-ordered distinct strings, silently capped."""

    def __init__(self, limit: int, exclude: str | None = None):
        self._limit = limit
        self._exclude = exclude
        self._items: dict[str, None] = {}

    def add(self, item: str) -> None:
        if item == self._exclude or len(self._items) >= self._limit:
            return
        self._items[item] = None

    def items(self) -> tuple[str, ...]:
        return tuple(self._items)
