"""
Corpus scan that derives the transliteration table from indexed values.

The scan looks only at author values that were actually indexed. Each value's
rule-generated variants become equivalences, but a variant carrying any
non-ascii character ("dvořak" from "dvořák") is kept only when it was itself
indexed. Groups merge transitively, so every accented member of a finished
group is an indexed spelling and an ascii query never reaches an invented one.
The same pairs are also recorded at surname level so combinations such as
"muller, h *" can borrow the surname equivalence.

The new table is built off to the side and published in one swap; a failed
scan leaves the previous table serving.
"""
from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from namexpand.paths import logger
from namexpand.services.tables import TableHolder, TransliterationTable
from namexpand.services.transliteration import count_non_ascii
from namexpand.types import ExpansionConfig


def _surname_key(value: str) -> str:
    return value.partition(",")[0].strip() + ","


class CorpusScanJob:
    """Offline batch rebuild of the corpus-derived transliteration table."""

    def __init__(
        self,
        config: ExpansionConfig,
        normalizer,
        rule_set,
        holder: TableHolder[TransliterationTable],
        pool=None,
    ):
        self._config = config
        self._normalizer = normalizer
        self._rule_set = rule_set
        self._holder = holder
        self._pool = pool

    def distinct_values(self, values: Iterable[str]) -> list[str]:
        """Distinct normalized values in sorted order; empty names are skipped."""
        distinct = {self._normalizer.norm(value) for value in values}
        distinct.discard("")
        return sorted(distinct)

    def _variants(self, values: list[str]) -> list[tuple[str, tuple[str, ...]]]:
        if self._pool is not None:
            return self._pool.generate_variants(values)
        return [(value, self._rule_set.generate_variants(value)) for value in values]

    def equivalences(self, values: Iterable[str]) -> list[tuple[str, str]]:
        """
        Corpus-validated (value, variant) pairs, name level then surname level.

        Deterministic for a given set of indexed values, whatever their order.
        """
        distinct = self.distinct_values(values)
        indexed = set(distinct)
        indexed_surnames = {_surname_key(value) for value in distinct}

        pairs: list[tuple[str, str]] = []
        surname_pairs: dict[tuple[str, str], None] = {}
        for value, variants in self._variants(distinct):
            surname = _surname_key(value)
            for variant in variants:
                if variant in indexed or not count_non_ascii(variant):
                    pairs.append((value, variant))

                variant_surname = _surname_key(variant)
                if variant_surname == surname:
                    continue
                if variant_surname in indexed_surnames or not count_non_ascii(variant_surname):
                    surname_pairs[(surname, variant_surname)] = None

        return pairs + list(surname_pairs)

    def build_table(self, values: Iterable[str]) -> TransliterationTable:
        return TransliterationTable(self.equivalences(values), source="corpus-scan")

    def run(self, values: Iterable[str], output_path: str | Path | None = None) -> bool:
        """
        Rebuild, optionally persist, then publish the table.

        Returns False, with the previous table still current, when any step
        fails.
        """
        previous = self._holder.current
        try:
            table = self.build_table(values)
            if output_path is not None:
                table.dump(output_path)
        except Exception as e:
            logger.warning(f"Corpus scan failed: {e}. Keeping transliteration table version {previous.version}.")
            return False

        if table.version == previous.version:
            logger.info(f"Corpus scan produced unchanged transliteration table version {table.version}")
            return True

        self._holder.publish(table)
        return True
