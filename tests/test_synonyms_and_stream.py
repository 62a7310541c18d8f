"""
Synonym expansion and stream-wide stage tests.
"""

import sys
from pathlib import Path

# Add the parent directory to path to import namexpand
sys.path.insert(0, str(Path(__file__).parent.parent))

from namexpand.services import (
    CuratedSynonymTable,
    Deduplicator,
    LowercaseFilter,
    PositionRepair,
)
from namexpand.types import Token, TokenType


def test_synonyms_follow_their_token(synonym_expander, curated_table):
    tokens = (Token("müller, herman"), Token("smith, j", TokenType.PLAIN, 0))

    result = synonym_expander.expand(tokens, curated_table, "curated_synonyms")

    assert [t.text for t in result] == ["müller, herman", "müller, hank", "smith, j"]
    synonym = result[1]
    assert synonym.type is TokenType.SYNONYM
    assert synonym.position_increment == 0
    assert synonym.origin == "curated_synonyms"


def test_lookup_misses_pass_through(synonym_expander, curated_table):
    tokens = (Token("ortiz, david"),)

    assert synonym_expander.expand(tokens, curated_table, "curated_synonyms") == tokens
    assert synonym_expander.expand(tokens, CuratedSynonymTable(), "curated_synonyms") == tokens


def test_synonyms_never_expand_a_truncated_part(synonym_expander):
    table = CuratedSynonymTable([["Ortiz, D", "Ortiz, David"]])

    assert synonym_expander.equivalents(Token("ortiz, d"), table) == ()
    assert synonym_expander.equivalents(Token("ortiz, david"), table) == ("ortiz, d",)


def test_combination_lookups_respect_query_initials(synonym_expander):
    table = CuratedSynonymTable([["Ortiz", "Ortiz, David", "Ortega"]])
    surname = Token("ortiz,", TokenType.COMBINATION, 0, "combine", partial=True)

    # Without the query's initials the bare surname reaches the full name
    assert "ortiz, david" in synonym_expander.equivalents(surname, table)
    assert synonym_expander.equivalents(surname, table, {0: "d"}) == ("ortega,",)
    assert synonym_expander.equivalents(surname, table, {0: "m"}) == ("ortega,",)

    result = synonym_expander.expand((Token("ortiz, d"), surname), table, "curated_synonyms", {0: "d"})
    assert [t.text for t in result] == ["ortiz, d", "ortega, d", "ortiz,", "ortega,"]


def test_synonyms_of_combinations_stay_partial(synonym_expander, muller_table):
    combination = Token("muller, h*", TokenType.COMBINATION, 0, "combine", partial=True)

    result = synonym_expander.expand((combination,), muller_table, "transliteration_table")

    assert [t.text for t in result] == ["muller, h*", "mueller, h*", "müller, h*"]
    assert all(t.partial for t in result)


def test_lowercase_filter():
    tokens = (Token("Müller, H"), Token("muller, h", TokenType.SYNONYM, 0))

    result = LowercaseFilter().apply(tokens)

    assert [t.text for t in result] == ["müller, h", "muller, h"]
    assert result[1] is tokens[1]


def test_position_repair():
    tokens = (
        Token("muller, h", position_increment=1),
        Token("müller, h", TokenType.SYNONYM, 1),
        Token("muller,", TokenType.COMBINATION, 2),
        Token("mueller, h", TokenType.SYNONYM, 0),
    )

    result = PositionRepair().apply(tokens)

    assert [t.position_increment for t in result] == [1, 0, 0, 0]
    assert [t.text for t in result] == [t.text for t in tokens]


def test_position_repair_keeps_first_increment():
    result = PositionRepair().apply((Token("a,", position_increment=3),))
    assert result[0].position_increment == 3


def test_deduplication():
    tokens = (
        Token("muller, h"),
        Token("muller,", TokenType.COMBINATION, 0),
        Token("muller,", TokenType.SYNONYM, 0),
        Token("muller,", TokenType.COMBINATION, 0),
        Token("muller, h", TokenType.PLAIN, 0),
    )

    result = Deduplicator().apply(tokens)

    assert [(t.text, t.type) for t in result] == [
        ("muller, h", TokenType.PLAIN),
        ("muller,", TokenType.COMBINATION),
        ("muller,", TokenType.SYNONYM),
    ]
    assert result[0].position_increment == 1
    assert Deduplicator().apply(result) == result


def test_empty_streams():
    for stage in (LowercaseFilter(), PositionRepair(), Deduplicator()):
        assert stage.apply(()) == ()
