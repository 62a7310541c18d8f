"""
Shared fixtures for the namexpand test suite.
"""

import sys
from pathlib import Path

import pytest

# Add the parent directory to path to import namexpand
sys.path.insert(0, str(Path(__file__).parent.parent))

from namexpand import AuthorNameExpander
from namexpand.services import (
    CuratedSynonymTable,
    NameCombinationGenerator,
    NormalizationService,
    PinyinCacheService,
    SynonymExpander,
    TransliterationRuleSet,
    TransliterationTable,
)
from namexpand.types import ExpansionConfig


@pytest.fixture
def config():
    return ExpansionConfig.create_default()


@pytest.fixture
def normalizer(config):
    return NormalizationService(config)


@pytest.fixture
def rule_set(config):
    return TransliterationRuleSet(config, PinyinCacheService(config))


@pytest.fixture
def combinations(config, normalizer):
    return NameCombinationGenerator(config, normalizer)


@pytest.fixture
def synonym_expander(normalizer):
    return SynonymExpander(normalizer)


@pytest.fixture
def muller_table():
    """Surname-level equivalence as the corpus scan would derive it."""
    return TransliterationTable([["Muller", "Mueller", "Müller"]])


@pytest.fixture
def curated_table():
    return CuratedSynonymTable.from_text("Müller, Herman; Müller, Hank\n")


@pytest.fixture
def expander(muller_table, curated_table):
    return AuthorNameExpander(transliteration_table=muller_table, curated_synonyms=curated_table)


@pytest.fixture
def bare_expander():
    """Expander with both tables empty: normalization and combinations only."""
    return AuthorNameExpander(transliteration_table=TransliterationTable(), curated_synonyms=CuratedSynonymTable())
