"""
Index-time and query-time pipelines.

Each stage is a pure function over the full materialized token stream. The
query pipeline runs a fixed, bounded sequence of passes instead of iterating
to a fixed point:

 1. normalize
 2. combine                   (first combination pass)
 3. transliteration_table     (corpus-derived equivalents)
 4. transliteration_rules     (variants of the step-1 tokens)
 5. recombine                 (combinations of full names new in 3-4)
 6. curated_synonyms
 7. curated_transliteration   (variants of tokens new in 6)
 8. lowercase
 9. position_repair
10. final_combine             (combinations of full names new in 6-7)
11. deduplicate

Exact mode keeps only 1, 8 and 11.
"""
from __future__ import annotations

from collections.abc import Iterable

from namexpand.paths import logger
from namexpand.services.stream import Deduplicator, LowercaseFilter, PositionRepair
from namexpand.types import ExpansionConfig, ExpansionResult, StageSnapshot, Token

EXPANDED = "expanded"
EXACT = "exact"
INDEX = "index"

_STEP_3_4_ORIGINS = frozenset({"transliteration_table", "transliteration_rules"})
_STEP_6_7_ORIGINS = frozenset({"curated_synonyms", "curated_transliteration"})


class IndexTimePipeline:
    """Minimal index-side analysis: normalization plus deduplication."""

    def __init__(self, normalizer):
        self._normalizer = normalizer
        self._deduplicator = Deduplicator()

    def run(self, raw: str) -> ExpansionResult:
        tokens = self._deduplicator.apply(self._normalizer.apply(raw))
        return ExpansionResult(raw=raw, mode=INDEX, requested_field=None, field=None, tokens=tokens)

    def run_many(self, raws: Iterable[str]) -> tuple[Token, ...]:
        """All author values of one document; repeated names are indexed once."""
        tokens: list[Token] = []
        for raw in raws:
            tokens.extend(self._normalizer.apply(raw))
        return self._deduplicator.apply(tokens)

    def indexed_values(self, raws: Iterable[str]) -> list[str]:
        return [token.text for token in self.run_many(raws)]


class QueryTimePipeline:
    """Fixed-order query expansion over immutable, snapshotted tables."""

    def __init__(
        self,
        config: ExpansionConfig,
        normalizer,
        rule_set,
        combinations,
        synonym_expander,
        transliteration_holder,
        curated_holder,
        query_builder,
    ):
        self._config = config
        self._normalizer = normalizer
        self._rule_set = rule_set
        self._combinations = combinations
        self._synonyms = synonym_expander
        self._transliteration = transliteration_holder
        self._curated = curated_holder
        self._query_builder = query_builder
        self._lowercase = LowercaseFilter()
        self._position_repair = PositionRepair()
        self._deduplicator = Deduplicator()

    def resolve_field(self, field: str | None) -> tuple[str, bool]:
        """Requested field → (field to build on, exact mode?)."""
        if field is None or field == self._config.base_field:
            return self._config.base_field, False
        if field == self._config.exact_field:
            return self._config.exact_field, True
        raise ValueError(
            f"unknown author field '{field}': expected '{self._config.base_field}' or '{self._config.exact_field}'",
        )

    def run(self, raw: str, field: str | None = None) -> ExpansionResult:
        build_field, exact = self.resolve_field(field)
        # One snapshot of each table per query; a concurrent publish does not affect this run
        transliteration_table = self._transliteration.current
        curated_table = self._curated.current

        stages: list[StageSnapshot] = []

        def record(name: str, tokens: tuple[Token, ...]) -> tuple[Token, ...]:
            stages.append(StageSnapshot(name, tokens))
            logger.debug(f"{name}: {len(tokens)} tokens")
            return tokens

        tokens = record("normalize", self._normalizer.apply(raw))
        # Initials of the input stay initials in every table-derived candidate
        truncated = self._normalizer.truncated_positions(tokens[0].text) if tokens else {}

        if tokens and not exact:
            tokens = record("combine", self._combinations.expand(tokens, "combine"))
            tokens = record(
                "transliteration_table",
                self._synonyms.expand(tokens, transliteration_table, "transliteration_table", truncated),
            )
            tokens = record(
                "transliteration_rules",
                self._rule_set.expand(tokens, "transliteration_rules", select=lambda t: t.origin == "normalize"),
            )
            tokens = record(
                "recombine",
                self._combinations.expand(tokens, "recombine", select=lambda t: t.origin in _STEP_3_4_ORIGINS),
            )
            tokens = record(
                "curated_synonyms",
                self._synonyms.expand(tokens, curated_table, "curated_synonyms", truncated),
            )
            tokens = record(
                "curated_transliteration",
                self._rule_set.expand(
                    tokens,
                    "curated_transliteration",
                    select=lambda t: t.origin == "curated_synonyms",
                ),
            )

        if tokens:
            tokens = record("lowercase", self._lowercase.apply(tokens))

        if tokens and not exact:
            tokens = record("position_repair", self._position_repair.apply(tokens))
            tokens = record(
                "final_combine",
                self._combinations.expand(tokens, "final_combine", select=lambda t: t.origin in _STEP_6_7_ORIGINS),
            )

        tokens = record("deduplicate", self._deduplicator.apply(tokens))

        query = self._query_builder.build(tokens, build_field)
        if exact:
            query = self._query_builder.rewrite_exact(query)

        return ExpansionResult(
            raw=raw,
            mode=EXACT if exact else EXPANDED,
            requested_field=field,
            field=query.field,
            tokens=tokens,
            stages=tuple(stages),
            query=query,
        )
