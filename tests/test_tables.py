"""
Equivalence table, persistence and table holder tests.
"""

import logging
import os
import sys
import threading
from pathlib import Path

import pytest

# Add the parent directory to path to import namexpand
sys.path.insert(0, str(Path(__file__).parent.parent))

from namexpand.services import (
    CuratedSynonymTable,
    TableHolder,
    TableInitializationService,
    TransliterationTable,
)
from namexpand.types import ExpansionConfig


def test_overlapping_groups_are_merged():
    table = TransliterationTable([["Müller", "Muller"], ["muller", "Mueller"]])

    assert table.groups == (("mueller,", "muller,", "müller,"),)
    assert len(table) == 3


def test_lookup_is_symmetric_and_case_insensitive(muller_table):
    assert muller_table.lookup("Muller,") == ("mueller,", "müller,")
    assert muller_table.lookup("MÜLLER,") == ("mueller,", "muller,")
    for member in ("muller,", "mueller,", "müller,"):
        others = set(muller_table.lookup(member))
        assert member not in others
        assert len(others) == 2


def test_lookup_substitutes_surname_keys(muller_table):
    assert muller_table.lookup("muller, h") == ("mueller, h", "müller, h")
    assert muller_table.lookup("muller, h *") == ("mueller, h *", "müller, h *")
    assert muller_table.lookup("miller, h") == ()


def test_lookup_normalizes_raw_names():
    table = TransliterationTable([["Muller", "Mueller"]])

    assert table.lookup("Muller") == ("mueller,",)
    assert "Muller" in table
    assert "  MUELLER ," in table
    assert table.lookup("Müller, H.") == ()

    umlaut = TransliterationTable([["Muller", "Mueller", "Müller"]])
    assert umlaut.lookup("Müller, H.") == ("mueller, h", "muller, h")
    assert "mueller, h." not in umlaut.lookup("Müller, H.")


def test_version_is_content_digest():
    a = TransliterationTable([["muller", "müller"], ["dvorak", "dvořák"]])
    b = TransliterationTable([["dvořák", "dvorak"], ["müller", "muller"]])

    assert a.version == b.version
    assert a.to_json() == b.to_json()
    assert TransliterationTable([["muller", "mueller"]]).version != a.version


def test_json_round_trip(muller_table):
    restored = TransliterationTable.from_json(muller_table.to_json())

    assert restored.groups == muller_table.groups
    assert restored.version == muller_table.version
    assert restored.to_json() == muller_table.to_json()


@pytest.mark.parametrize(
    ("document", "message"),
    [
        ("{not json", "corrupt"),
        ('{"kind": "transliteration"}', "missing 'groups'"),
        ('{"kind": "transliteration", "groups": [[1, 2]]}', "lists of strings"),
        ('{"kind": "curated", "groups": []}', "expected a transliteration table"),
        ('{"kind": "transliteration", "version": "0000", "groups": [["a", "b"]]}', "version mismatch"),
    ],
)
def test_from_json_rejects_corrupt_documents(document, message):
    with pytest.raises(ValueError, match=message):
        TransliterationTable.from_json(document)


def test_dump_and_load(tmp_path, muller_table):
    path = muller_table.dump(tmp_path / "tables" / "transliteration_table.json")
    loaded = TransliterationTable.load(path)

    assert loaded.version == muller_table.version
    assert loaded.info().source == str(path)
    assert not (tmp_path / "tables" / "transliteration_table.json.tmp").exists()


def test_curated_text_format():
    text = """
    # editorial equivalences
    Müller, Herman; Müller, Hank   # nickname
    Smith, Robert; Smith, Bob; Smith, Rob
    """
    table = CuratedSynonymTable.from_text(text)

    assert table.groups == (
        ("müller, hank", "müller, herman"),
        ("smith, bob", "smith, rob", "smith, robert"),
    )
    assert table.lookup("Müller, Herman") == ("müller, hank",)


def test_curated_line_needs_two_names():
    with pytest.raises(ValueError, match="at least two names"):
        CuratedSynonymTable.from_text("Müller, Herman\n")


def test_curated_load_dispatches_on_suffix(tmp_path, curated_table):
    text_path = tmp_path / "curated.txt"
    text_path.write_text("Müller, Herman; Müller, Hank\n", encoding="utf-8")
    json_path = curated_table.dump(tmp_path / "curated.json")

    assert CuratedSynonymTable.load(text_path).version == curated_table.version
    assert CuratedSynonymTable.load(json_path).version == curated_table.version


def test_table_info(muller_table):
    info = muller_table.info()

    assert info.kind == "transliteration"
    assert info.version == muller_table.version
    assert info.group_count == 1
    assert info.key_count == 3


def test_empty_table_is_falsy():
    table = TransliterationTable()

    assert not table
    assert table.lookup("muller, h") == ()


# ════════════════════════════════════════════════════════════════════════════════
# TABLE HOLDER
# ════════════════════════════════════════════════════════════════════════════════


def test_publish_swaps_atomically(muller_table):
    holder = TableHolder(TransliterationTable())
    snapshot = holder.current

    previous = holder.publish(muller_table)

    assert previous is snapshot
    assert holder.current is muller_table
    assert holder.generation == 1
    # A reader's earlier snapshot is untouched by the publish
    assert snapshot.lookup("muller, h") == ()


def test_publish_rejects_other_table_kind(curated_table):
    holder = TableHolder(TransliterationTable())

    with pytest.raises(TypeError, match="TransliterationTable"):
        holder.publish(curated_table)


def test_refresh_adopts_newer_file(tmp_path, muller_table):
    path = muller_table.dump(tmp_path / "transliteration_table.json")
    holder = TableHolder(TransliterationTable())

    assert holder.refresh(path)
    assert holder.current.version == muller_table.version
    # Unchanged file: nothing to do
    assert not holder.refresh(path)


def test_refresh_keeps_serving_on_corrupt_file(tmp_path, muller_table, caplog):
    path = muller_table.dump(tmp_path / "transliteration_table.json")
    holder = TableHolder(TransliterationTable())
    holder.refresh(path)

    path.write_text("{broken", encoding="utf-8")
    stat = path.stat()
    os.utime(path, (stat.st_atime + 10, stat.st_mtime + 10))

    with caplog.at_level(logging.WARNING, logger="namexpand"):
        assert not holder.refresh(path)

    assert holder.current.version == muller_table.version
    assert "reload failed" in caplog.text


def test_refresh_missing_file(tmp_path):
    holder = TableHolder(TransliterationTable())

    assert not holder.refresh(tmp_path / "missing.json")
    assert holder.generation == 0


def test_concurrent_refresh_publishes_once(tmp_path, muller_table):
    path = muller_table.dump(tmp_path / "transliteration_table.json")
    holder = TableHolder(TransliterationTable())
    start = threading.Barrier(8)
    results = []

    def poll():
        start.wait()
        results.append(holder.refresh(path))

    threads = [threading.Thread(target=poll) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert holder.generation == 1
    assert holder.current.version == muller_table.version


# ════════════════════════════════════════════════════════════════════════════════
# STARTUP LOADING
# ════════════════════════════════════════════════════════════════════════════════


def test_missing_tables_degrade_to_empty(tmp_path, caplog):
    service = TableInitializationService(ExpansionConfig(data_dir=tmp_path))

    with caplog.at_level(logging.WARNING, logger="namexpand"):
        tables = service.initialize_tables()

    assert not tables.transliteration
    assert not tables.curated
    assert "not found" in caplog.text


def test_corrupt_table_degrades_to_empty(tmp_path, caplog):
    (tmp_path / "transliteration_table.json").write_text("[]", encoding="utf-8")
    (tmp_path / "curated_synonyms.txt").write_text("Müller, Herman; Müller, Hank\n", encoding="utf-8")
    service = TableInitializationService(ExpansionConfig(data_dir=tmp_path))

    with caplog.at_level(logging.WARNING, logger="namexpand"):
        tables = service.initialize_tables()

    assert not tables.transliteration
    assert tables.curated.lookup("müller, hank") == ("müller, herman",)
    assert "Failed to load transliteration table" in caplog.text
