#!/usr/bin/env python3
"""
Expand one author name and show what the query pipeline produced.

Prints the final tokens (text, type, origin, position increment), optionally
the token count after every stage, and the rendered OR-query.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from namexpand import AuthorNameExpander
from namexpand.types import ExpansionConfig


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Expand an author name into its query terms.")
    parser.add_argument("name", help='Author name, e.g. "Muller, H".')
    parser.add_argument("--field", default=None, help="Query field; the exact field disables expansion.")
    parser.add_argument("--transliteration-table", type=Path, default=None, help="Transliteration table JSON.")
    parser.add_argument("--curated-synonyms", type=Path, default=None, help="Curated synonym file.")
    parser.add_argument("--stages", action="store_true", help="Print token counts per stage.")
    parser.add_argument("--no-wildcards", action="store_true", help="Disable wildcard combinations.")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.WARNING)

    config = ExpansionConfig(
        add_wildcards=not args.no_wildcards,
        transliteration_table_path=args.transliteration_table,
        curated_synonyms_path=args.curated_synonyms,
    )
    expander = AuthorNameExpander(config)
    result = expander.expand(args.name, args.field)

    if result.is_empty:
        print("(no query)")
        return 1

    print(f"mode={result.mode} field={result.field}")
    if args.stages:
        for stage in result.stages:
            print(f"  {stage.name:<24} {len(stage.tokens)}")
    print()
    for token in result.tokens:
        print(f"{token.position_increment}  {token.type.value:<15} {token.origin:<24} {token.text}")
    print()
    print(result.query.render())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
