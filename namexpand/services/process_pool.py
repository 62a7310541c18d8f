"""
Worker processes for the corpus scan.

Rule variants of every distinct indexed author value are independent of each
other, so a large rebuild can fan them out. Workers start once, build their own
rule set (romanization cache included) and keep it warm across scans; batches
come back in submission order so a pooled scan yields the same table bytes as
a single-process one.
"""

from __future__ import annotations

import pickle
from concurrent.futures import ProcessPoolExecutor
from concurrent.futures.process import BrokenProcessPool
from multiprocessing import get_all_start_methods, get_context
from typing import TYPE_CHECKING

from namexpand.types import ExpansionConfig

if TYPE_CHECKING:
    from namexpand.services.transliteration import TransliterationRuleSet


_WORKER_RULE_SET: TransliterationRuleSet | None = None

VariantPairs = list[tuple[str, tuple[str, ...]]]


def _init_worker(config: ExpansionConfig | None) -> None:
    from namexpand.services.cache import PinyinCacheService
    from namexpand.services.transliteration import TransliterationRuleSet

    global _WORKER_RULE_SET
    config = config or ExpansionConfig.create_default()
    _WORKER_RULE_SET = TransliterationRuleSet(config, PinyinCacheService(config))


def _scan_batch(values: list[str]) -> VariantPairs:
    """(value, rule variants) for one batch of normalized author values."""
    if _WORKER_RULE_SET is None:
        raise RuntimeError("corpus scan worker started without a rule set")
    return [(value, _WORKER_RULE_SET.generate_variants(value)) for value in values]


def _batches(values: list[str], batch_size: int) -> list[list[str]]:
    return [values[start : start + batch_size] for start in range(0, len(values), batch_size)]


class PersistentScanPool:
    """
    Long-lived workers that generate transliteration variants for corpus scans.

    Hand one pool to every CorpusScanJob of a process: each rebuild reuses the
    warm rule sets instead of paying for worker start-up and romanization
    cache misses again. Workers are spawned, not forked, so they never inherit
    a published table or a held TableHolder lock.
    """

    def __init__(
        self,
        *,
        max_workers: int | None = None,
        chunk_size: int = 512,
        mp_start_method: str = "spawn",
        config: ExpansionConfig | None = None,
    ) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1 author values per batch")

        self._chunk_size = chunk_size
        self._closed = False
        self._config = config

        self._check_config_ships()

        try:
            mp_context = get_context(mp_start_method)
        except ValueError as exc:
            available = ", ".join(get_all_start_methods())
            raise ValueError(
                f"corpus scan pool cannot use start method '{mp_start_method}' (this platform offers: {available})",
            ) from exc

        self._executor = ProcessPoolExecutor(
            max_workers=max_workers,
            mp_context=mp_context,
            initializer=_init_worker,
            initargs=(self._config,),
        )

    def _check_config_ships(self) -> None:
        """Workers rebuild their rule set from a pickled copy of the expansion config."""
        try:
            pickle.dumps(self._config)
        except (pickle.PicklingError, AttributeError, TypeError) as exc:
            raise ValueError("expansion config cannot be sent to corpus scan workers") from exc

    @property
    def chunk_size(self) -> int:
        """Author values per worker batch."""
        return self._chunk_size

    @property
    def closed(self) -> bool:
        return self._closed

    def generate_variants(self, values: list[str]) -> VariantPairs:
        """
        (value, variants) for every value, in input order.

        Drop-in for the single-process loop in CorpusScanJob: the pairs, and so
        the rebuilt table, are identical whichever path produced them.
        """
        if self._closed:
            raise RuntimeError("corpus scan pool is closed; create a new one for further rebuilds")
        if not values:
            return []

        results: VariantPairs = []
        try:
            for batch in self._executor.map(_scan_batch, _batches(values, self._chunk_size), chunksize=1):
                results.extend(batch)
        except BrokenProcessPool as exc:
            raise RuntimeError(
                f"corpus scan workers died while expanding {len(values)} author values; "
                "spawned workers re-import the calling module, so start rebuilds from "
                "code under `if __name__ == '__main__':`",
            ) from exc
        return results

    def close(self) -> None:
        """Stop the workers; pending batches finish first."""
        if self._closed:
            return
        self._executor.shutdown(wait=True, cancel_futures=False)
        self._closed = True

    def __enter__(self) -> PersistentScanPool:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def generate_variants_multiprocess(
    values: list[str],
    *,
    max_workers: int | None = None,
    chunk_size: int = 512,
    mp_start_method: str = "spawn",
    config: ExpansionConfig | None = None,
) -> VariantPairs:
    """One-off scan batch: starts a pool, expands `values`, shuts it down."""
    with PersistentScanPool(
        max_workers=max_workers,
        chunk_size=chunk_size,
        mp_start_method=mp_start_method,
        config=config,
    ) as pool:
        return pool.generate_variants(values)
