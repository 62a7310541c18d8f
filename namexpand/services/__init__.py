"""
Services package for author-name expansion.

This package contains all service classes used by the expansion pipelines,
organized by domain responsibility.
"""

from namexpand.services.cache import PinyinCacheService
from namexpand.services.combinations import NameCombinationGenerator
from namexpand.services.corpus_scan import CorpusScanJob
from namexpand.services.initialization import NameTables, TableInitializationService
from namexpand.services.normalization import NormalizationService, normalize_name
from namexpand.services.pipelines import IndexTimePipeline, QueryTimePipeline
from namexpand.services.process_pool import PersistentScanPool, generate_variants_multiprocess
from namexpand.services.query import BooleanQuery, PrefixClause, QueryBuilder, TermClause
from namexpand.services.stream import Deduplicator, LowercaseFilter, PositionRepair
from namexpand.services.synonyms import SynonymExpander
from namexpand.services.tables import CuratedSynonymTable, EquivalenceTable, TableHolder, TransliterationTable
from namexpand.services.transliteration import TransliterationRuleSet, count_non_ascii
from namexpand.types import ExpansionConfig, ParseResult, TableInfo

__all__ = [
    # Query model
    "BooleanQuery",
    "CorpusScanJob",
    "CuratedSynonymTable",
    "Deduplicator",
    "EquivalenceTable",
    # Types (re-exported for convenience)
    "ExpansionConfig",
    "IndexTimePipeline",
    "LowercaseFilter",
    "NameCombinationGenerator",
    # Data structures
    "NameTables",
    "NormalizationService",
    "ParseResult",
    "PersistentScanPool",
    # Services
    "PinyinCacheService",
    "PositionRepair",
    "PrefixClause",
    "QueryBuilder",
    "QueryTimePipeline",
    "SynonymExpander",
    "TableHolder",
    "TableInfo",
    "TableInitializationService",
    "TermClause",
    "TransliterationRuleSet",
    "TransliterationTable",
    "count_non_ascii",
    "generate_variants_multiprocess",
    "normalize_name",
]
