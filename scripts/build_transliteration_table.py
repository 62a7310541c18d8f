#!/usr/bin/env python3
"""
Rebuild the corpus-derived transliteration table.

Reads indexed author values (one per line), runs the corpus scan and writes
the JSON table that the expander loads at startup. With --workers the variant
generation runs in a persistent process pool.
"""

from __future__ import annotations

import argparse
import logging
import multiprocessing as mp
import sys
from pathlib import Path

from namexpand.services import (
    CorpusScanJob,
    NormalizationService,
    PersistentScanPool,
    PinyinCacheService,
    TableHolder,
    TransliterationRuleSet,
    TransliterationTable,
)
from namexpand.types import ExpansionConfig


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the transliteration table from indexed author values.")
    parser.add_argument("values", type=Path, help="Text file with one indexed author value per line.")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Destination JSON file (default: the package data directory).",
    )
    parser.add_argument("--workers", type=int, default=0, help="Worker processes; 0 scans in-process.")
    parser.add_argument("--chunk-size", type=int, default=512, help="Chunk size for worker IPC batching.")
    parser.add_argument("--max-variants", type=int, default=64, help="Variant cap per value.")
    parser.add_argument("--verbose", action="store_true", help="Log at INFO level.")
    return parser.parse_args()


def _read_values(path: Path) -> list[str]:
    with path.open(encoding="utf-8") as handle:
        return [line.rstrip("\n") for line in handle if line.strip()]


def main() -> int:
    args = _parse_args()

    if args.workers < 0:
        raise ValueError("--workers must be >= 0")
    if args.chunk_size < 1:
        raise ValueError("--chunk-size must be >= 1")

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    config = ExpansionConfig(max_variants=args.max_variants, scan_chunk_size=args.chunk_size)
    output = args.output or config.transliteration_table_file
    values = _read_values(args.values)

    normalizer = NormalizationService(config)
    rule_set = TransliterationRuleSet(config, PinyinCacheService(config))
    holder = TableHolder(TransliterationTable())

    if args.workers:
        with PersistentScanPool(max_workers=args.workers, chunk_size=args.chunk_size, config=config) as pool:
            ok = CorpusScanJob(config, normalizer, rule_set, holder, pool=pool).run(values, output_path=output)
    else:
        ok = CorpusScanJob(config, normalizer, rule_set, holder).run(values, output_path=output)

    if not ok:
        print("scan failed; no table written", file=sys.stderr)
        return 1

    info = holder.current.info()
    print(f"values={len(values)} groups={info.group_count} keys={info.key_count} version={info.version}")
    print(f"written={output}")
    return 0


if __name__ == "__main__":
    mp.freeze_support()
    raise SystemExit(main())
