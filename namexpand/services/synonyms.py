"""
Synonym expansion service.

Generic table-lookup stage: each token is followed by its table equivalents as
SYNONYM alternatives at the same position. Works with either the
transliteration table or the curated synonym table.
"""
from __future__ import annotations

from collections.abc import Iterable

from namexpand.services.tables import EquivalenceTable
from namexpand.types import Token, TokenType


class SynonymExpander:
    """Pure, order-preserving synonym expansion."""

    def __init__(self, normalizer):
        self._normalizer = normalizer

    def equivalents(
        self,
        token: Token,
        table: EquivalenceTable,
        truncated: dict[int, str] | None = None,
    ) -> tuple[str, ...]:
        """
        Table equivalents of one token that keep its truncated parts intact.

        `truncated` holds the truncated parts of the name the query started
        from. Lookups on combinations ("ortiz,") carry no initials of their
        own, so candidates are checked against both: "ortiz, d" never picks
        up "ortiz, david" here, whatever the table says.
        """
        if not table:
            return ()
        return tuple(
            candidate
            for candidate in table.lookup(token.text)
            if self._normalizer.preserves_truncation(token.text, candidate)
            and self._normalizer.keeps_positions(truncated or {}, candidate)
        )

    def expand(
        self,
        tokens: Iterable[Token],
        table: EquivalenceTable,
        origin: str,
        truncated: dict[int, str] | None = None,
    ) -> tuple[Token, ...]:
        out: list[Token] = []
        for token in tokens:
            out.append(token)
            for candidate in self.equivalents(token, table, truncated):
                out.append(token.derive(candidate, TokenType.SYNONYM, origin))
        return tuple(out)
