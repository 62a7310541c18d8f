"""
Boolean query model for expanded author names.

The final token stream becomes one OR-query over literal terms on a single
field. Tokens ending in "*" become prefix clauses. The model renders to a
Lucene-style query string and can evaluate itself against indexed values,
which is how the tests check what a query would match.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, replace

from namexpand.types import Token

_LUCENE_SPECIAL = re.compile(r'([+\-!(){}\[\]^"~*?:\\/&| ,])')


def _escape(text: str) -> str:
    return _LUCENE_SPECIAL.sub(r"\\\1", text)


@dataclass(frozen=True)
class TermClause:
    """Exact match of one indexed value."""

    field: str
    value: str

    def matches(self, indexed: str) -> bool:
        return indexed == self.value

    def render(self) -> str:
        return f'{self.field}:"{self.value}"'


@dataclass(frozen=True)
class PrefixClause:
    """Prefix match: every indexed value starting with `prefix`."""

    field: str
    prefix: str

    def matches(self, indexed: str) -> bool:
        return indexed.startswith(self.prefix)

    def render(self) -> str:
        return f"{self.field}:{_escape(self.prefix)}*"


@dataclass(frozen=True)
class BooleanQuery:
    """OR-query over term and prefix clauses on one field."""

    field: str
    clauses: tuple[TermClause | PrefixClause, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.clauses

    @property
    def terms(self) -> tuple[str, ...]:
        return tuple(c.value if isinstance(c, TermClause) else f"{c.prefix}*" for c in self.clauses)

    def matches(self, indexed: str) -> bool:
        return any(clause.matches(indexed) for clause in self.clauses)

    def render(self) -> str:
        return " OR ".join(clause.render() for clause in self.clauses)

    def with_field(self, field: str) -> BooleanQuery:
        """Same clauses, different field - nothing else changes."""
        return BooleanQuery(field=field, clauses=tuple(replace(clause, field=field) for clause in self.clauses))


class QueryBuilder:
    """Service for turning token streams into field queries."""

    def __init__(self, config):
        self._config = config

    def build(self, tokens: Iterable[Token], field: str) -> BooleanQuery:
        clauses: list[TermClause | PrefixClause] = []
        seen: set[str] = set()
        for token in tokens:
            if not token.text or token.text in seen:
                continue
            seen.add(token.text)
            if token.is_wildcard:
                clauses.append(PrefixClause(field, token.text[:-1]))
            else:
                clauses.append(TermClause(field, token.text))
        return BooleanQuery(field=field, clauses=tuple(clauses))

    def rewrite_exact(self, query: BooleanQuery) -> BooleanQuery:
        """Map the exact field onto the base field before execution."""
        if query.field != self._config.exact_field:
            return query
        return query.with_field(self._config.base_field)
