"""
Tests for the persistent multi-process corpus scan pool.
"""

import pickle
import sys
from pathlib import Path

import pytest

# Add the parent directory to path to import namexpand
sys.path.insert(0, str(Path(__file__).parent.parent))

from namexpand.services import (
    CorpusScanJob,
    PersistentScanPool,
    TableHolder,
    TransliterationTable,
    generate_variants_multiprocess,
)

TEST_VALUES = [
    "müller, hans",
    "muller, h",
    "mueller, k",
    "dvořák, antonín",
    "smith, john",
    "strauss, j",
    "张, 伟",
    "šimek, š",
]


def test_generate_variants_multiprocess_matches_single_process(config, rule_set):
    """Multi-process convenience path should match single-process output exactly."""
    expected = [(value, rule_set.generate_variants(value)) for value in TEST_VALUES]
    actual = generate_variants_multiprocess(TEST_VALUES, max_workers=2, chunk_size=3, config=config)

    assert actual == expected


def test_persistent_pool_can_be_reused(config, rule_set):
    """Persistent pool should support repeated scans without changing outputs."""
    values_a = TEST_VALUES[:4]
    values_b = TEST_VALUES[4:]

    with PersistentScanPool(max_workers=2, chunk_size=2, config=config) as pool:
        actual_a = pool.generate_variants(values_a)
        actual_b = pool.generate_variants(values_b)

    assert actual_a == [(value, rule_set.generate_variants(value)) for value in values_a]
    assert actual_b == [(value, rule_set.generate_variants(value)) for value in values_b]


def test_pooled_scan_builds_identical_table(config, normalizer, rule_set):
    single = CorpusScanJob(config, normalizer, rule_set, TableHolder(TransliterationTable()))

    with PersistentScanPool(max_workers=2, chunk_size=2, config=config) as pool:
        pooled = CorpusScanJob(config, normalizer, rule_set, TableHolder(TransliterationTable()), pool=pool)
        pooled_table = pooled.build_table(TEST_VALUES)

    assert pooled_table.to_json() == single.build_table(TEST_VALUES).to_json()


def test_persistent_pool_rejects_calls_after_close(config):
    """Closed pool should raise a clear error on subsequent use."""
    pool = PersistentScanPool(max_workers=2, chunk_size=2, config=config)
    pool.close()

    assert pool.closed
    with pytest.raises(RuntimeError, match="corpus scan pool is closed"):
        pool.generate_variants(["müller, hans"])


def test_empty_batch_returns_empty_list(config):
    with PersistentScanPool(max_workers=1, config=config) as pool:
        assert pool.generate_variants([]) == []


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"max_workers": 0}, "max_workers"),
        ({"chunk_size": 0}, "chunk_size"),
        ({"mp_start_method": "teleport"}, "cannot use start method"),
    ],
)
def test_invalid_pool_arguments(kwargs, message):
    with pytest.raises(ValueError, match=message):
        PersistentScanPool(**kwargs)


def test_unpicklable_config_is_rejected_before_start(monkeypatch, config):
    def refuse(_config):
        raise TypeError("cannot pickle '_thread.lock' object")

    monkeypatch.setattr(pickle, "dumps", refuse)

    with pytest.raises(ValueError, match="cannot be sent to corpus scan workers"):
        PersistentScanPool(max_workers=1, config=config)
