"""
Transliteration rule set and variant generation.

Variant generation turns one name into the alternative spellings that the
static rule table says represent the same sound ("müller" → "muller",
"mueller"). It is used online on query tokens and offline by the corpus scan.
"""
from __future__ import annotations

import itertools
from collections.abc import Callable, Iterable, Mapping

from namexpand.transliteration_data import MAX_RULE_LENGTH, TRANSLITERATION_RULES
from namexpand.types import ExpansionConfig, Token, TokenType
from namexpand.types.results import is_initial

# Product iterations allowed per requested variant before giving up on
# duplicate-heavy inputs.
_PRODUCT_BUDGET_FACTOR = 8


def count_non_ascii(text: str) -> int:
    """Zero for a pure-ascii spelling ("muller"), the accent count otherwise."""
    return sum(1 for c in text if not c.isascii())


class TransliterationRuleSet:
    """Static grapheme → alternatives table plus variant generation."""

    def __init__(self, config: ExpansionConfig, cache_service, rules: Mapping[str, tuple[str, ...]] | None = None):
        self._config = config
        self._cache_service = cache_service
        if rules is None:
            self._rules = dict(TRANSLITERATION_RULES)
            self._max_rule_length = MAX_RULE_LENGTH
        else:
            self._rules = dict(rules)
            self._max_rule_length = max((len(key) for key in self._rules), default=1)

    @property
    def rules(self) -> Mapping[str, tuple[str, ...]]:
        return self._rules

    def alternatives(self, grapheme: str) -> tuple[str, ...]:
        """Alternatives for one grapheme; unknown graphemes have none."""
        return self._rules.get(grapheme, ())

    # ════════════════════════════════════════════════════════════════════
    # SEGMENTATION
    # ════════════════════════════════════════════════════════════════════

    def segment(self, text: str) -> list[tuple[str, ...]]:
        """
        Split text into substitution slots.

        Each slot is a tuple of options whose first element is the original
        spelling. Literal stretches are single-option slots. Truncated given
        parts (single letters, optionally wildcarded) are kept literal so no
        variant can replace them.
        """
        slots: list[tuple[str, ...]] = []
        surname, comma, given = text.partition(",")
        slots.extend(self._segment_word_run(surname))
        if comma:
            slots.append((",",))
            for piece in self._split_keeping_spaces(given):
                if piece.isspace() or is_initial(piece) or not piece.rstrip("*"):
                    slots.append((piece,))
                else:
                    slots.extend(self._segment_word_run(piece))
        return slots

    def _split_keeping_spaces(self, text: str) -> list[str]:
        return ["".join(group) for _, group in itertools.groupby(text, key=str.isspace)]

    def _segment_word_run(self, text: str) -> list[tuple[str, ...]]:
        slots: list[tuple[str, ...]] = []
        literal: list[str] = []
        i = 0

        def flush() -> None:
            if literal:
                slots.append(("".join(literal),))
                literal.clear()

        while i < len(text):
            ch = text[i]

            # Han runs romanize as one unit
            if self._cache_service.is_han(ch):
                j = i
                while j < len(text) and self._cache_service.is_han(text[j]):
                    j += 1
                run = text[i:j]
                flush()
                slots.append((run, self._cache_service.romanize(run)))
                i = j
                continue

            # Longest rule match first so digraphs win over single letters
            for size in range(min(self._max_rule_length, len(text) - i), 0, -1):
                piece = text[i : i + size]
                options = self._rules.get(piece)
                if options:
                    flush()
                    slots.append((piece, *options))
                    i += size
                    break
            else:
                literal.append(ch)
                i += 1

        flush()
        return slots

    # ════════════════════════════════════════════════════════════════════
    # VARIANT GENERATION
    # ════════════════════════════════════════════════════════════════════

    def generate_variants(self, text: str, limit: int | None = None) -> tuple[str, ...]:
        """
        Cross-product of substitutions across every mapped occurrence.

        Returns the distinct variants other than `text` itself, in rule-table
        order, truncated to `limit` (default: config.max_variants). Empty when
        the text contains no mapped grapheme.
        """
        limit = self._config.max_variants if limit is None else limit
        if limit <= 0 or not text:
            return ()

        slots = self.segment(text)
        if all(len(options) == 1 for options in slots):
            return ()

        variants: list[str] = []
        seen = {text}
        budget = limit * _PRODUCT_BUDGET_FACTOR
        for combination in itertools.islice(itertools.product(*slots), budget):
            candidate = "".join(combination)
            if candidate in seen:
                continue
            seen.add(candidate)
            variants.append(candidate)
            if len(variants) >= limit:
                break
        return tuple(variants)

    def expand(
        self,
        tokens: Iterable[Token],
        origin: str,
        select: Callable[[Token], bool] | None = None,
    ) -> tuple[Token, ...]:
        """
        Insert TRANSLITERATED variants right after each selected token.

        Wildcard combinations are transliterated too: their fixed parts are
        literal slots, so "müller, h *" yields "muller, h *".
        """
        out: list[Token] = []
        for token in tokens:
            out.append(token)
            if select is not None and not select(token):
                continue
            for variant in self.generate_variants(token.text):
                out.append(token.derive(variant, TokenType.TRANSLITERATED, origin))
        return tuple(out)
