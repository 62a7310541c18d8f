"""
Value types for author-name expansion.

Tokens, parsed names and pipeline results are frozen dataclasses: they are
created and discarded within one pipeline invocation and shared freely
between threads.
"""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass, replace
from enum import Enum


def is_initial(word: str) -> bool:
    """True for a single letter (optionally wildcarded) that is not a Han character."""
    bare = word.rstrip("*")
    if len(bare) != 1 or not bare.isalpha():
        return False
    return not unicodedata.name(bare, "").startswith(("CJK UNIFIED", "CJK COMPATIBILITY"))


class TokenType(Enum):
    """Kind of token in an expansion stream."""

    PLAIN = "plain"
    TRANSLITERATED = "transliterated"
    COMBINATION = "combination"
    SYNONYM = "synonym"


@dataclass(frozen=True)
class Token:
    """One term of an expansion stream."""

    text: str
    type: TokenType = TokenType.PLAIN
    position_increment: int = 1
    origin: str = "normalize"
    # True when the text is a combination of a name (or derived from one)
    # rather than a complete name; partial tokens are never recombined.
    partial: bool = False

    def __post_init__(self):
        if self.position_increment < 0:
            raise ValueError("position_increment must be >= 0")

    @property
    def is_wildcard(self) -> bool:
        return self.text.endswith("*")

    def with_text(self, text: str) -> Token:
        return replace(self, text=text)

    def with_position_increment(self, position_increment: int) -> Token:
        return replace(self, position_increment=position_increment)

    def derive(self, text: str, token_type: TokenType, origin: str) -> Token:
        """Alternative for this token at the same position, inheriting partiality."""
        partial = self.partial or self.type is TokenType.COMBINATION or token_type is TokenType.COMBINATION
        return Token(text=text, type=token_type, position_increment=0, origin=origin, partial=partial)


@dataclass(frozen=True)
class GivenPart:
    """A given-name part; truncated parts are single letters and terminal."""

    text: str
    truncated: bool

    @classmethod
    def from_text(cls, text: str) -> GivenPart:
        return cls(text=text, truncated=is_initial(text))

    @property
    def initial(self) -> str:
        """Initial-letter rendering ("jean-pierre" -> "j-p")."""
        if self.truncated:
            return self.text
        return "-".join(piece[0] for piece in self.text.split("-") if piece)


@dataclass(frozen=True)
class ParsedName:
    """Normalized name split as surname + ordered given parts."""

    surname: str
    given_parts: tuple[GivenPart, ...] = ()

    @property
    def is_bare_surname(self) -> bool:
        return not self.given_parts

    def render(self) -> str:
        if not self.given_parts:
            return f"{self.surname},"
        return f"{self.surname}, " + " ".join(part.text for part in self.given_parts)


@dataclass(frozen=True)
class ParseResult:
    """Result of name parsing operation - Either-like structure."""

    success: bool
    result: str | ParsedName
    error_message: str | None = None

    @classmethod
    def success_with_parse(cls, surname: str, given_parts: tuple[GivenPart, ...]) -> ParseResult:
        return cls(success=True, result=ParsedName(surname, tuple(given_parts)), error_message=None)

    @classmethod
    def failure(cls, error_message: str) -> ParseResult:
        return cls(success=False, result="", error_message=error_message)

    def get_or_else(self, default):
        return self.result if self.success else default


@dataclass(frozen=True)
class StageSnapshot:
    """Token stream as it stood after one pipeline stage."""

    name: str
    tokens: tuple[Token, ...]

    @property
    def texts(self) -> frozenset[str]:
        return frozenset(token.text for token in self.tokens)


@dataclass(frozen=True)
class ExpansionResult:
    """Outcome of one query/index pipeline run."""

    raw: str
    mode: str  # "expanded" | "exact" | "index"
    requested_field: str | None
    field: str | None
    tokens: tuple[Token, ...]
    stages: tuple[StageSnapshot, ...] = ()
    query: object | None = None

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    @property
    def terms(self) -> tuple[str, ...]:
        """Distinct token texts in stream order."""
        return tuple(dict.fromkeys(token.text for token in self.tokens))

    def stage(self, name: str) -> StageSnapshot:
        for snapshot in self.stages:
            if snapshot.name == name:
                return snapshot
        raise KeyError(name)


@dataclass(frozen=True)
class TableInfo:
    """Immutable table diagnostics."""

    kind: str
    version: str
    group_count: int
    key_count: int
    source: str | None = None
