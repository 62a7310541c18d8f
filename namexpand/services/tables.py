"""
Equivalence tables for author-name expansion.

Both the corpus-derived transliteration table and the curated synonym table
are immutable, versioned sets of equivalence groups. A TableHolder is the
shared read pointer: writers build a new table off to the side and swap it in,
readers take one snapshot per query and never lock.
"""
from __future__ import annotations

import hashlib
import json
import threading
from collections.abc import Iterable
from pathlib import Path
from types import MappingProxyType
from typing import Generic, TypeVar

from namexpand.paths import logger
from namexpand.services.normalization import normalize_name, table_key
from namexpand.types import TableInfo


def _merge_groups(groups: Iterable[Iterable[str]]) -> tuple[tuple[str, ...], ...]:
    """Union overlapping groups; returns sorted groups of >= 2 members, sorted."""
    parent: dict[str, str] = {}

    def find(item: str) -> str:
        root = item
        while parent[root] != root:
            root = parent[root]
        while parent[item] != root:
            parent[item], item = root, parent[item]
        return root

    for group in groups:
        members = [m for m in group if m]
        if not members:
            continue
        for member in members:
            parent.setdefault(member, member)
        first = find(members[0])
        for member in members[1:]:
            root = find(member)
            if root != first:
                # Smallest string becomes the root so merges are order independent
                low, high = sorted((first, root))
                parent[high] = low
                first = low

    merged: dict[str, set[str]] = {}
    for member in parent:
        merged.setdefault(find(member), set()).add(member)

    return tuple(sorted(tuple(sorted(members)) for members in merged.values() if len(members) > 1))


class EquivalenceTable:
    """
    Immutable bidirectional name → equivalents mapping built from groups.

    Lookup is case-insensitive and symmetric: every member of a group maps to
    all other members. A name with given parts also matches through its
    surname key, so a surname-level group {"muller,", "müller,"} turns
    "muller, h *" into "müller, h *".
    """

    kind = "equivalence"

    def __init__(self, groups: Iterable[Iterable[str]] = (), version: str | None = None, source: str | None = None):
        normalized_groups = ([self._normalize_entry(entry) for entry in group] for group in groups)
        self._groups = _merge_groups(normalized_groups)
        self._version = version or self._digest(self._groups)
        self._source = source

        index: dict[str, tuple[str, ...]] = {}
        for group in self._groups:
            for member in group:
                index[member] = tuple(other for other in group if other != member)
        self._index = MappingProxyType(index)

    @staticmethod
    def _normalize_entry(entry: str) -> str:
        return normalize_name(entry)

    @staticmethod
    def _digest(groups: tuple[tuple[str, ...], ...]) -> str:
        payload = json.dumps(groups, ensure_ascii=False, separators=(",", ":"))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]

    # ---------- read API ----------
    @property
    def version(self) -> str:
        return self._version

    @property
    def groups(self) -> tuple[tuple[str, ...], ...]:
        return self._groups

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, text: str) -> bool:
        return self._lookup_key(text) in self._index

    def __bool__(self) -> bool:
        return bool(self._index)

    @staticmethod
    def _lookup_key(text: str) -> str:
        # Entries are stored normalized; wildcard tokens keep their markers
        return table_key(text) if "*" in text else normalize_name(text)

    def lookup(self, text: str) -> tuple[str, ...]:
        """
        Equivalents of `text`, excluding `text` itself.

        Whole-name equivalents come first, then surname-level substitutions
        that keep the given portion (including wildcards) untouched.
        """
        key = self._lookup_key(text)
        found = list(self._index.get(key, ()))

        surname, comma, rest = key.partition(",")
        if comma and rest:
            for equivalent in self._index.get(f"{surname},", ()):
                if equivalent.endswith(","):
                    found.append(equivalent + rest)

        return tuple(candidate for candidate in dict.fromkeys(found) if candidate != key)

    def info(self) -> TableInfo:
        return TableInfo(
            kind=self.kind,
            version=self._version,
            group_count=len(self._groups),
            key_count=len(self._index),
            source=self._source,
        )

    # ---------- persisted form ----------
    def to_json(self) -> str:
        """Deterministic serialization: same groups → same bytes."""
        document = {"kind": self.kind, "version": self._version, "groups": [list(group) for group in self._groups]}
        return json.dumps(document, ensure_ascii=False, sort_keys=True, indent=1) + "\n"

    @classmethod
    def from_json(cls, text: str, source: str | None = None):
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"corrupt {cls.kind} table: {exc}") from exc

        if not isinstance(document, dict) or not isinstance(document.get("groups"), list):
            raise ValueError(f"corrupt {cls.kind} table: missing 'groups' list")
        kind = document.get("kind", cls.kind)
        if kind != cls.kind:
            raise ValueError(f"expected a {cls.kind} table, found '{kind}'")

        groups = document["groups"]
        if not all(isinstance(group, list) and all(isinstance(m, str) for m in group) for group in groups):
            raise ValueError(f"corrupt {cls.kind} table: groups must be lists of strings")

        table = cls(groups, source=source)
        declared = document.get("version")
        if declared is not None and declared != table.version:
            raise ValueError(f"{cls.kind} table version mismatch: declared {declared}, content {table.version}")
        return table

    def dump(self, path: str | Path) -> Path:
        """Write the table next to its destination, then rename into place."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(self.to_json(), encoding="utf-8")
        tmp.replace(path)
        return path

    @classmethod
    def load(cls, path: str | Path):
        path = Path(path)
        return cls.from_json(path.read_text(encoding="utf-8"), source=str(path))


class TransliterationTable(EquivalenceTable):
    """Corpus-derived ascii/unicode equivalences; rebuilt only by the corpus scan."""

    kind = "transliteration"


class CuratedSynonymTable(EquivalenceTable):
    """Hand-maintained name equivalences; loaded once, never regenerated."""

    kind = "curated"

    @classmethod
    def from_text(cls, text: str, source: str | None = None) -> CuratedSynonymTable:
        """
        Parse the line format: one group per line, members separated by ";",
        "#" starts a comment.
        """
        groups = []
        for line in text.splitlines():
            line = line.split("#", 1)[0].strip()
            if not line:
                continue
            members = [member.strip() for member in line.split(";") if member.strip()]
            if len(members) < 2:
                raise ValueError(f"curated synonym line needs at least two names: {line!r}")
            groups.append(members)
        return cls(groups, source=source)

    @classmethod
    def load(cls, path: str | Path) -> CuratedSynonymTable:
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            return cls.from_json(text, source=str(path))
        return cls.from_text(text, source=str(path))


TableT = TypeVar("TableT", bound=EquivalenceTable)


class TableHolder(Generic[TableT]):
    """
    Shared read pointer with atomic swap-on-publish.

    Readers call `current` once per query and keep that reference; a publish
    never mutates a table, it only rebinds the pointer.
    """

    def __init__(self, table: TableT):
        self._table = table
        self._table_cls = type(table)
        self._write_lock = threading.RLock()
        self._generation = 0
        self._source_mtime: float | None = None

    @property
    def current(self) -> TableT:
        return self._table

    @property
    def generation(self) -> int:
        return self._generation

    def publish(self, table: TableT) -> TableT:
        """Swap in a new table; returns the previous one (still valid for its holders)."""
        if not isinstance(table, self._table_cls):
            raise TypeError(f"expected {self._table_cls.__name__}, got {type(table).__name__}")
        with self._write_lock:
            previous = self._table
            self._table = table
            self._generation += 1
        logger.info(
            f"Published {table.kind} table version {table.version} "
            f"({len(table.groups)} groups, generation {self._generation})",
        )
        return previous

    def refresh(self, path: str | Path) -> bool:
        """
        Poll a persisted table and adopt it when it changed.

        Returns True when a new version was published. A missing or corrupt
        file keeps the current version serving.
        """
        path = Path(path)
        # Concurrent pollers see one check-and-set; publish re-enters the same lock
        with self._write_lock:
            try:
                mtime = path.stat().st_mtime
            except OSError as exc:
                logger.warning(f"Cannot stat {self._table_cls.kind} table at {path}: {exc}")
                return False

            if mtime == self._source_mtime:
                return False

            try:
                table = self._table_cls.load(path)
            except (OSError, ValueError) as exc:
                logger.warning(f"Keeping {self._table_cls.kind} table {self._table.version}: reload failed: {exc}")
                return False

            self._source_mtime = mtime
            if table.version == self._table.version:
                return False
            self.publish(table)
            return True
