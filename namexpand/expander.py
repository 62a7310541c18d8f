"""
Author-Name Query Expansion Module

This module expands author-name queries so that the different ways one person's
name appears in bibliographic records (accented or ascii, complete or
truncated, historically varied spellings) resolve to the same indexed values.

## Overview

The core functionality is provided by the `AuthorNameExpander` class, which
wires the expansion services into two pipelines:

1. **Index time**: Normalize each author value to "surname, given parts" and
   deduplicate. Nothing else is added to the index.
2. **Query time**: Normalize, then expand through name combinations, the
   corpus-derived transliteration table, rule-based transliteration variants,
   curated synonyms, position repair and deduplication, and emit one OR-query.

## Architecture

### Clean Service Separation
- **NormalizationService**: Canonical "surname, given" form and name parsing
- **TransliterationRuleSet**: Static grapheme alternatives and variant generation
- **NameCombinationGenerator**: Truncated and wildcarded renderings of a name
- **SynonymExpander**: Table lookups for both equivalence tables
- **CorpusScanJob**: Offline rebuild of the transliteration table
- **AuthorNameExpander**: Entry point with dependency injection

### Immutable Tables
- Both tables are immutable and versioned. A `TableHolder` swaps a new
  version in atomically; each query reads one snapshot of each table.
- A missing or corrupt table file is logged and replaced by an empty table,
  so queries keep working with normalization and combinations only.

## Usage Examples

```python
from namexpand import AuthorNameExpander

expander = AuthorNameExpander()
result = expander.expand("Ortiz, David A")
result.terms
# ('ortiz, david a', 'ortiz,', 'ortiz, d', 'ortiz, david', 'ortiz, d a*', 'ortiz, david a*')

expander.query("Ortiz, D").render()
# 'author:"ortiz, d" OR author:"ortiz," OR author:ortiz\\,\\ d*'

# Exact mode: normalization only, executed on the base field
expander.exact("Müller, H").query.render()
# 'author:"müller, h"'

# Rebuild the transliteration table from indexed values
expander.rebuild_transliteration_table(["Müller, Hans", "Muller, H", "Mueller, K"])
```

## Thread Safety

The expander is thread-safe after initialization. Queries share only immutable
tables, and a table rebuild publishes by reference swap.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from namexpand.services import (
    BooleanQuery,
    CorpusScanJob,
    CuratedSynonymTable,
    ExpansionConfig,
    IndexTimePipeline,
    NameCombinationGenerator,
    NameTables,
    NormalizationService,
    PersistentScanPool,
    PinyinCacheService,
    QueryBuilder,
    QueryTimePipeline,
    SynonymExpander,
    TableHolder,
    TableInfo,
    TableInitializationService,
    TransliterationRuleSet,
    TransliterationTable,
)
from namexpand.types import ExpansionResult

# ════════════════════════════════════════════════════════════════════════════════
# MAIN AUTHOR NAME EXPANDER CLASS
# ════════════════════════════════════════════════════════════════════════════════


class AuthorNameExpander:
    """Main author-name expansion service."""

    def __init__(
        self,
        config: ExpansionConfig | None = None,
        transliteration_table: TransliterationTable | None = None,
        curated_synonyms: CuratedSynonymTable | None = None,
    ):
        self._config = config or ExpansionConfig.create_default()
        self._cache_service = PinyinCacheService(self._config)
        self._normalizer = NormalizationService(self._config)
        self._rule_set = TransliterationRuleSet(self._config, self._cache_service)
        self._combinations = NameCombinationGenerator(self._config, self._normalizer)
        self._synonyms = SynonymExpander(self._normalizer)
        self._query_builder = QueryBuilder(self._config)
        self._table_service = TableInitializationService(self._config)
        self._initial_tables = (transliteration_table, curated_synonyms)

        # Pipelines (initialized after table loading)
        self._transliteration: TableHolder[TransliterationTable] | None = None
        self._curated: TableHolder[CuratedSynonymTable] | None = None
        self._index_pipeline = IndexTimePipeline(self._normalizer)
        self._query_pipeline: QueryTimePipeline | None = None

        self._initialize()

    def _initialize(self) -> None:
        """Load tables and build the query pipeline."""
        try:
            self._initialize_pipelines(self._load_tables())
        except Exception as e:
            logging.warning(f"Failed to initialize at construction: {e}. Will initialize lazily.")

    def _load_tables(self) -> NameTables:
        transliteration, curated = self._initial_tables
        return NameTables(
            transliteration=transliteration
            if transliteration is not None
            else self._table_service.load_transliteration_table(),
            curated=curated if curated is not None else self._table_service.load_curated_synonyms(),
        )

    def _initialize_pipelines(self, tables: NameTables) -> None:
        self._transliteration = TableHolder(tables.transliteration)
        self._curated = TableHolder(tables.curated)
        self._query_pipeline = QueryTimePipeline(
            self._config,
            self._normalizer,
            self._rule_set,
            self._combinations,
            self._synonyms,
            self._transliteration,
            self._curated,
            self._query_builder,
        )

    def _ensure_initialized(self) -> None:
        """Ensure tables are loaded (lazy initialization)."""
        if self._query_pipeline is None:
            self._initialize_pipelines(self._load_tables())

    @property
    def config(self) -> ExpansionConfig:
        return self._config

    # ════════════════════════════════════════════════════════════════════════
    # QUERY API
    # ════════════════════════════════════════════════════════════════════════

    def expand(self, raw_name: str, field: str | None = None) -> ExpansionResult:
        """
        Run the query pipeline for one author name.

        `field` selects the mode: None or the base field expands, the exact
        field runs exact mode. Any other field raises ValueError.
        """
        self._ensure_initialized()
        return self._query_pipeline.run(raw_name, field)

    def query(self, raw_name: str, field: str | None = None) -> BooleanQuery:
        """The executable OR-query for one author name."""
        return self.expand(raw_name, field).query

    def exact(self, raw_name: str) -> ExpansionResult:
        return self.expand(raw_name, self._config.exact_field)

    # ════════════════════════════════════════════════════════════════════════
    # INDEX API
    # ════════════════════════════════════════════════════════════════════════

    def index_value(self, raw_name: str) -> ExpansionResult:
        return self._index_pipeline.run(raw_name)

    def index(self, raw_names: Iterable[str]) -> list[str]:
        """Indexed values for one document's author list."""
        return self._index_pipeline.indexed_values(raw_names)

    # ════════════════════════════════════════════════════════════════════════
    # TABLE MANAGEMENT
    # ════════════════════════════════════════════════════════════════════════

    @property
    def transliteration_table(self) -> TransliterationTable:
        self._ensure_initialized()
        return self._transliteration.current

    @property
    def curated_synonyms(self) -> CuratedSynonymTable:
        self._ensure_initialized()
        return self._curated.current

    def create_scan_pool(self, mp_start_method: str = "spawn") -> PersistentScanPool:
        """Persistent worker pool for corpus scans, sized from the config."""
        return PersistentScanPool(
            max_workers=self._config.scan_workers,
            chunk_size=self._config.scan_chunk_size,
            mp_start_method=mp_start_method,
            config=self._config,
        )

    def rebuild_transliteration_table(
        self,
        indexed_values: Iterable[str],
        output_path: str | Path | None = None,
        pool: PersistentScanPool | None = None,
    ) -> bool:
        """
        Run the corpus scan over indexed author values and publish the result.

        Returns False when the scan failed; the previous table keeps serving.
        """
        self._ensure_initialized()
        job = CorpusScanJob(self._config, self._normalizer, self._rule_set, self._transliteration, pool=pool)
        return job.run(indexed_values, output_path=output_path)

    def publish_transliteration_table(self, table: TransliterationTable) -> TransliterationTable:
        """Swap in a new transliteration table; returns the previous one."""
        self._ensure_initialized()
        return self._transliteration.publish(table)

    def publish_curated_synonyms(self, table: CuratedSynonymTable) -> CuratedSynonymTable:
        self._ensure_initialized()
        return self._curated.publish(table)

    def refresh_tables(self) -> tuple[bool, bool]:
        """Adopt newer persisted tables from the configured paths, if any."""
        self._ensure_initialized()
        return (
            self._transliteration.refresh(self._config.transliteration_table_file),
            self._curated.refresh(self._config.curated_synonyms_file),
        )

    def get_table_info(self) -> tuple[TableInfo, TableInfo]:
        """Diagnostics for the transliteration and curated tables."""
        self._ensure_initialized()
        return self._transliteration.current.info(), self._curated.current.info()

    def get_cache_info(self) -> int:
        """Number of memoised Han characters."""
        return self._cache_service.cache_size
