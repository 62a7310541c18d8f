"""
Normalization service for author names.

This module canonicalizes raw author strings into the "surname, given parts"
form used both at index time and at query time, and parses that form into a
surname plus ordered given parts.
"""
from __future__ import annotations

import unicodedata
from functools import lru_cache

from namexpand.types import ExpansionConfig, GivenPart, ParsedName, ParseResult, Token, TokenType
from namexpand.types.results import is_initial

_DEFAULT_CONFIG = ExpansionConfig.create_default()


@lru_cache(maxsize=32_768)
def _normalize(raw: str, config: ExpansionConfig) -> str:
    """
    Canonicalize one raw name.

    ORDER OF OPERATIONS:
    1. NFC composition, so "u" + combining diaeresis and "ü" are the same key
    2. Lower-casing
    3. Edge trimming of whitespace and punctuation (a trailing "." of an
       initial or a trailing "," of a bare surname goes here)
    4. Split at the FIRST comma only; later commas and periods are separators
    5. Separator cleanup and whitespace collapse on both halves
    6. Reassembly as "surname, given" or "surname," for a bare surname

    Idempotent: the output is a fixed point of every step above.
    """
    text = unicodedata.normalize("NFC", raw).lower().strip(config.edge_characters)
    if not text:
        return ""

    surname, _, given = text.partition(",")
    surname = _clean(surname, config)
    given = _clean(given, config)

    if not surname:
        # Nothing usable before the comma: the rest is the surname
        surname, given = given, ""
        if not surname:
            return ""

    return f"{surname}, {given}" if given else f"{surname},"


def _clean(part: str, config: ExpansionConfig) -> str:
    part = config.separator_pattern.sub(" ", part)
    words = (word.strip("-") for word in config.whitespace_pattern.split(part))
    return " ".join(word for word in words if word)


def normalize_name(raw: str, config: ExpansionConfig | None = None) -> str:
    """Module-level normalization used where no service instance is at hand."""
    return _normalize(raw or "", config or _DEFAULT_CONFIG)


def table_key(text: str, config: ExpansionConfig | None = None) -> str:
    """
    Lookup key for a stream token: NFC + lower + whitespace collapse.

    Unlike full normalization this keeps wildcard markers, so combination
    tokens such as "muller, h *" look up under their own text.
    """
    config = config or _DEFAULT_CONFIG
    text = unicodedata.normalize("NFC", text).lower()
    return config.whitespace_pattern.sub(" ", text).strip()


class NormalizationService:
    """Pure normalization service."""

    def __init__(self, config: ExpansionConfig):
        self._config = config

    def norm(self, raw: str) -> str:
        """Normalize a raw name to its canonical comma-delimited form."""
        return normalize_name(raw, self._config)

    def apply(self, raw: str) -> tuple[Token, ...]:
        """
        Pure function: raw input → normalized token stream.

        Returns one PLAIN token, or an empty stream when nothing is left after
        trimming (callers treat that as "no query").
        """
        normalized = self.norm(raw)
        if not normalized:
            return ()
        return (Token(normalized, TokenType.PLAIN, 1, "normalize"),)

    def parse(self, normalized: str) -> ParseResult:
        """
        Parse a normalized name into surname + given parts.

        Wildcard-bearing combination text is not a name and fails to parse.
        """
        if not normalized or "*" in normalized:
            return ParseResult.failure("not a parseable name")

        surname, comma, given = normalized.partition(",")
        surname = surname.strip()
        if not comma or not surname:
            return ParseResult.failure("surname not recognised")

        parts = tuple(GivenPart.from_text(word) for word in given.split())
        return ParseResult.success_with_parse(surname, parts)

    def parse_or_surname(self, normalized: str) -> ParsedName:
        """Parse, degrading to a surname-only name when no surname is found."""
        result = self.parse(normalized)
        if result.success:
            return result.result
        return ParsedName(normalized.strip().rstrip(","))

    # ════════════════════════════════════════════════════════════════════
    # TRUNCATION INVARIANT
    # ════════════════════════════════════════════════════════════════════

    def truncated_positions(self, text: str) -> dict[int, str]:
        """Given-part index → text for every truncated (single letter) part."""
        _, comma, given = text.partition(",")
        if not comma:
            return {}
        positions = {}
        for index, word in enumerate(given.split()):
            if is_initial(word):
                positions[index] = word.rstrip("*")
        return positions

    def preserves_truncation(self, source: str, candidate: str) -> bool:
        """
        True when `candidate` renders every truncated part of `source` unchanged.

        A candidate may drop trailing parts but may never replace the text of a
        truncated part, nor turn it into a longer (expanded) form.
        """
        return self.keeps_positions(self.truncated_positions(source), candidate)

    def keeps_positions(self, truncated: dict[int, str], candidate: str) -> bool:
        """True when `candidate` has each truncated letter (or nothing) at its index."""
        if not truncated:
            return True

        _, _, given = candidate.partition(",")
        words = given.split()
        for index, letter in truncated.items():
            if index >= len(words):
                continue
            if words[index].rstrip("*") != letter:
                return False
        return True
