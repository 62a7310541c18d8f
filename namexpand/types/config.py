"""
Configuration for author-name expansion.

A single frozen configuration object is created once and handed to every
service. Regex patterns are compiled here so services never compile on the
query path.
"""
from __future__ import annotations

import re
import string
from dataclasses import dataclass, field
from pathlib import Path

from namexpand.paths import DATA_PATH

# Characters trimmed from both ends of a raw name. Apostrophes are kept so that
# particles like "'t Hooft" survive.
EDGE_CHARACTERS = "".join(c for c in string.punctuation if c != "'") + string.whitespace


@dataclass(frozen=True)
class ExpansionConfig:
    """Immutable expansion settings - one instance per expander."""

    # Combinatorial caps (4.2 cross-product, 4.4 combination count)
    max_variants: int = 64
    max_combinations: int = 256

    # Name combination options
    min_given_parts: int = 1
    add_wildcards: bool = True
    add_shortened_multi_name: bool = False
    plain_surname: bool = True
    bare_surname_prefix: bool = True

    # Fields: the exact field is rewritten onto the base field before execution
    base_field: str = "author"
    exact_field: str = "author_exact"

    # Persisted tables
    data_dir: Path = DATA_PATH
    transliteration_table_path: Path | None = None
    curated_synonyms_path: Path | None = None

    # Corpus scan
    scan_workers: int | None = None
    scan_chunk_size: int = 512

    # Precompiled patterns
    whitespace_pattern: re.Pattern[str] = field(default=re.compile(r"\s+"), repr=False)
    separator_pattern: re.Pattern[str] = field(default=re.compile(r"[.,;:_/\\()\[\]{}\"*!?&+]+"), repr=False)
    cjk_pattern: re.Pattern[str] = field(
        default=re.compile(r"[㐀-䶿一-鿿豈-﫿]"),
        repr=False,
    )
    edge_characters: str = field(default=EDGE_CHARACTERS, repr=False)

    def __post_init__(self):
        if self.max_variants < 0:
            raise ValueError("max_variants must be >= 0")
        if self.max_combinations < 0:
            raise ValueError("max_combinations must be >= 0")
        if self.min_given_parts < 0:
            raise ValueError("min_given_parts must be >= 0")
        if self.scan_workers is not None and self.scan_workers < 1:
            raise ValueError("scan_workers must be >= 1")
        if self.scan_chunk_size < 1:
            raise ValueError("scan_chunk_size must be >= 1")
        if self.base_field == self.exact_field:
            raise ValueError("base_field and exact_field must differ")

    @classmethod
    def create_default(cls) -> ExpansionConfig:
        return cls()

    @property
    def transliteration_table_file(self) -> Path:
        if self.transliteration_table_path is not None:
            return Path(self.transliteration_table_path)
        return Path(self.data_dir) / "transliteration_table.json"

    @property
    def curated_synonyms_file(self) -> Path:
        if self.curated_synonyms_path is not None:
            return Path(self.curated_synonyms_path)
        return Path(self.data_dir) / "curated_synonyms.txt"
