"""
Table initialization service for author-name expansion.

This module loads the persisted transliteration table and the curated synonym
list at startup. A missing or corrupt file never stops query serving: it is
logged and replaced by an empty table, which leaves normalization and name
combinations working with reduced recall.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from namexpand.paths import logger
from namexpand.services.tables import CuratedSynonymTable, EquivalenceTable, TransliterationTable
from namexpand.types import ExpansionConfig


@dataclass(frozen=True)
class NameTables:
    """Immutable container for the two lookup tables."""

    transliteration: TransliterationTable
    curated: CuratedSynonymTable


class TableInitializationService:
    """Service to initialize the lookup tables."""

    def __init__(self, config: ExpansionConfig):
        self._config = config

    def initialize_tables(self) -> NameTables:
        """Load both tables, degrading each one independently."""
        return NameTables(
            transliteration=self.load_transliteration_table(),
            curated=self.load_curated_synonyms(),
        )

    def load_transliteration_table(self, path: str | Path | None = None) -> TransliterationTable:
        return self._load(TransliterationTable, Path(path) if path else self._config.transliteration_table_file)

    def load_curated_synonyms(self, path: str | Path | None = None) -> CuratedSynonymTable:
        return self._load(CuratedSynonymTable, Path(path) if path else self._config.curated_synonyms_file)

    def _load(self, table_cls: type[EquivalenceTable], path: Path):
        if not path.exists():
            logger.warning(f"{table_cls.kind} table not found at {path}; serving without it.")
            return table_cls()

        try:
            table = table_cls.load(path)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load {table_cls.kind} table from {path}: {e}. Serving without it.")
            return table_cls()

        logger.info(f"Loaded {table_cls.kind} table version {table.version} from {path} ({len(table.groups)} groups)")
        return table
