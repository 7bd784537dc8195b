"""
Record normalizer tests.

Validates:
- JSON-string and already-structured fields convert the same way
- Empty strings read as absent, stringly booleans and numbers are parsed
- Malformed JSON raises a decode error naming field, match and group
- Coercion between bracket types is idempotent and leaves inputs untouched
- Bracket data converts 0-based stored indexes to 1-based and back
"""

import json

import pytest

from matchgroup.services.errors import MatchRecordDecodeError
from matchgroup.services.match_group_types import (
    AdvanceSpot,
    BracketBracketData,
    ChildEdge,
    MatchCoordinates,
    MatchlistBracketData,
)
from matchgroup.services.record_normalizer import (
    bracket_data_from_record,
    bracket_data_to_record,
    coerce_match_records_to_type,
    create_opponent,
    match_from_record,
    read_bracket_type,
)
from matchgroup.utils.record_values import parse_or_copy, read_bool_or_none, to_number


def _structured_record():
    return {
        "match2id": "grp_R01-M001",
        "match2bracketid": "grp",
        "date": "2024-05-01 18:00:00",
        "dateexact": "true",
        "finished": "1",
        "winner": "1",
        "walkover": "",
        "vod": "",
        "match2bracketdata": {"type": "bracket", "parentMatchId": "grp_R02-M001"},
        "match2opponents": [
            {
                "type": "team",
                "name": "Alpha",
                "template": "alpha",
                "score": "2",
                "placement": "1",
                "status": "S",
                "extradata": {"bg": "up", "advances": "true", "seed": 1},
                "match2players": [{"name": "Ann", "displayname": "ann", "flag": "de"}],
            },
            {"type": "team", "name": "Beta", "score": "1", "placement": "2", "extradata": {}},
        ],
        "match2games": [
            {"map": "Dust", "winner": "1", "scores": [16, 10], "extradata": {"comment": "OT", "header": "Map 1"}},
        ],
        "extradata": {"comment": "Postponed", "pbg1": "up", "pbg2": "down", "mvp": "Ann"},
        "links": {"preview": "https://example.org/p"},
        "stream": {},
    }


def _stringified(record):
    fields = ("match2bracketdata", "extradata", "links", "stream")
    copy = {k: (json.dumps(v) if k in fields else v) for k, v in record.items()}
    copy["match2opponents"] = [
        {**o, "extradata": json.dumps(o.get("extradata", {}))} for o in record["match2opponents"]
    ]
    copy["match2opponents"] = json.dumps(copy["match2opponents"])
    copy["match2games"] = json.dumps(record["match2games"])
    return copy


# ---------------------------------------------------------------------------
# Value parsers
# ---------------------------------------------------------------------------


class TestValueParsers:

    @pytest.mark.parametrize(
        "value,expected",
        [("true", True), ("false", False), (1, True), (0, False), (True, True), (None, None), ("", None), ("x", None)],
    )
    def test_read_bool_or_none(self, value, expected):
        assert read_bool_or_none(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [("2", 2), (" 3 ", 3), ("1.5", 1.5), ("2.0", 2), (4, 4), ("", None), ("abc", None), ("nan", None), (True, None)],
    )
    def test_to_number(self, value, expected):
        assert to_number(value) == expected

    def test_parse_or_copy_decodes_json(self):
        assert parse_or_copy('{"a": 1}', "extradata") == {"a": 1}

    def test_parse_or_copy_copies_structures(self):
        source = {"a": [1, 2]}
        parsed = parse_or_copy(source, "extradata")
        parsed["a"].append(3)
        assert source == {"a": [1, 2]}

    @pytest.mark.parametrize("value", [None, "", "null"])
    def test_parse_or_copy_defaults(self, value):
        assert parse_or_copy(value, "match2games", default=list) == []

    def test_parse_or_copy_malformed(self):
        with pytest.raises(MatchRecordDecodeError) as exc_info:
            parse_or_copy("{not json", "links", match_id="grp_0001", group_id="grp")
        assert exc_info.value.field == "links"
        assert exc_info.value.match_id == "grp_0001"
        assert exc_info.value.group_id == "grp"


# ---------------------------------------------------------------------------
# match_from_record
# ---------------------------------------------------------------------------


class TestMatchFromRecord:

    def test_structured_record(self):
        match = match_from_record(_structured_record())

        assert match.match_id == "grp_R01-M001"
        assert match.date_is_exact is True
        assert match.finished is True
        assert match.winner == 1
        assert match.walkover is None
        assert match.vod is None
        assert match.comment == "Postponed"
        assert match.position_backgrounds == ["up", "down"]
        assert match.extradata == {"mvp": "Ann"}
        assert match.links == {"preview": "https://example.org/p"}
        assert match.type == "literal"

    def test_opponents(self):
        alpha, beta = match_from_record(_structured_record()).opponents

        assert alpha.type == "team"
        assert alpha.score == 2
        assert alpha.placement == 1
        assert alpha.advance_bg == "up"
        assert alpha.advances is True
        assert alpha.extradata == {"seed": 1}
        assert alpha.players[0].page_name == "Ann"
        assert alpha.players[0].display_name == "ann"
        assert beta.advances is None
        assert beta.players == []

    def test_games(self):
        (game,) = match_from_record(_structured_record()).games

        assert game.map == "Dust"
        assert game.winner == 1
        assert game.scores == [16, 10]
        assert game.comment == "OT"
        assert game.header == "Map 1"
        assert game.extradata == {}

    def test_json_strings_match_structured_fields(self):
        record = _structured_record()
        assert match_from_record(_stringified(record)) == match_from_record(record)

    def test_source_record_not_mutated(self):
        record = _structured_record()
        before = json.dumps(record, sort_keys=True)
        match_from_record(record)
        assert json.dumps(record, sort_keys=True) == before

    def test_malformed_field_raises(self):
        record = _structured_record()
        record["match2games"] = "[{"
        with pytest.raises(MatchRecordDecodeError) as exc_info:
            match_from_record(record, "grp")
        assert exc_info.value.field == "match2games"
        assert exc_info.value.match_id == "grp_R01-M001"

    def test_pbg_stops_at_gap(self):
        record = _structured_record()
        record["extradata"] = {"pbg1": "up", "pbg3": "down"}
        match = match_from_record(record)
        assert match.position_backgrounds == ["up"]
        assert match.extradata == {}

    def test_minimal_record(self):
        match = match_from_record({"match2id": "grp_0001"})
        assert isinstance(match.bracket_data, MatchlistBracketData)
        assert match.opponents == []
        assert match.games == []
        assert match.date_is_exact is False


def test_create_opponent_defaults():
    opponent = create_opponent(name="Alpha", score=3)
    assert opponent.type == "literal"
    assert opponent.players == []
    assert opponent.extradata == {}
    assert opponent.score == 3


# ---------------------------------------------------------------------------
# Bracket data
# ---------------------------------------------------------------------------


class TestBracketDataFromRecord:

    def test_matchlist(self):
        data = bracket_data_from_record({"type": "matchlist", "header": "Day 1", "title": ""})
        assert data == MatchlistBracketData(header="Day 1", title=None)

    def test_unknown_type_reads_as_matchlist(self):
        assert isinstance(bracket_data_from_record({"type": "swiss"}), MatchlistBracketData)

    def test_indexes_become_one_based(self):
        data = bracket_data_from_record(
            {
                "type": "bracket",
                "childMatchIds": ["g_R01-M001", "g_R01-M002"],
                "childEdges": [{"childMatchIndex": 0, "opponentIndex": 0}, {"childMatchIndex": 1, "opponentIndex": 1}],
                "coordinates": {
                    "depth": 0,
                    "depthCount": 2,
                    "matchIndexInRound": 0,
                    "rootIndex": 0,
                    "roundCount": 2,
                    "roundIndex": 1,
                    "sectionCount": 1,
                    "sectionIndex": 0,
                    "semanticDepth": 0,
                    "semanticRoundIndex": 1,
                },
            }
        )

        assert data.child_edges == [ChildEdge(1, 1), ChildEdge(2, 2)]
        assert data.coordinates.round_index == 2
        assert data.coordinates.section_index == 1
        assert data.coordinates.root_index == 1
        assert data.coordinates.match_index_in_round == 1
        assert data.coordinates.depth == 0
        assert data.coordinates.round_count == 2

    def test_legacy_child_match_ids(self):
        data = bracket_data_from_record({"type": "bracket", "toupper": "g_R01-M001", "tolower": "g_R01-M002"})
        assert data.child_match_ids == ["g_R01-M001", "g_R01-M002"]

    def test_child_edges_assigned_when_missing(self):
        data = bracket_data_from_record(
            {"type": "bracket", "childMatchIds": ["g_R01-M001", "g_R01-M002"]}, opponent_count=4
        )
        assert data.child_edges == [ChildEdge(1, 2), ChildEdge(2, 3)]

    def test_skip_counts(self):
        data = bracket_data_from_record({"type": "bracket", "skipround": "true", "qualskip": "2"})
        assert data.skip_round == 1
        assert data.qual_skip == 2

    def test_stored_advance_spots_used_as_is(self):
        data = bracket_data_from_record(
            {
                "type": "bracket",
                "parentMatchId": "g_R02-M001",
                "advanceSpots": [None, {"bg": "down", "type": "qualify"}],
            }
        )
        assert data.advance_spots == [None, AdvanceSpot(bg="down", type="qualify")]
        assert data.qual_lose is True
        assert data.qual_win is False

    def test_qualification_flags(self):
        data = bracket_data_from_record({"type": "bracket", "qualwin": "true", "qualwinLiteral": "Finals"})
        assert data.qual_win is True
        assert data.qual_win_literal == "Finals"
        assert data.advance_spot(1) == AdvanceSpot(bg="up", type="qualify")


class TestBracketDataToRecord:

    def test_deprecated_fields(self):
        data = BracketBracketData(
            child_match_ids=["g_R01-M001", "g_R01-M002", "g_R01-M003"],
            coordinates=MatchCoordinates(
                depth=0,
                depth_count=2,
                match_index_in_round=1,
                root_index=1,
                round_count=2,
                round_index=2,
                section_count=2,
                section_index=2,
                semantic_depth=0,
                semantic_round_index=2,
            ),
        )
        record = bracket_data_to_record(data)

        assert record["bracketsection"] == "lower"
        assert record["toupper"] == "g_R01-M002"
        assert record["tolower"] == "g_R01-M003"
        assert record["coordinates"]["roundIndex"] == 1
        assert record["coordinates"]["sectionIndex"] == 1
        assert record["coordinates"]["depth"] == 0

    def test_converts_back(self):
        data = bracket_data_from_record(
            {
                "type": "bracket",
                "parentMatchId": "g_R02-M001",
                "childMatchIds": ["g_R00-M001"],
                "childEdges": [{"childMatchIndex": 0, "opponentIndex": 1}],
                "winnerto": "g_R03-M001",
            }
        )
        again = bracket_data_from_record(bracket_data_to_record(data))
        assert again == data

    def test_matchlist(self):
        assert bracket_data_to_record(MatchlistBracketData(header="Day 1")) == {
            "header": "Day 1",
            "title": None,
            "type": "matchlist",
        }


# ---------------------------------------------------------------------------
# Bracket type coercion
# ---------------------------------------------------------------------------


def _records(bracket_type):
    return [
        {"match2id": "g_0001", "match2bracketdata": json.dumps({"type": bracket_type, "title": "Day 1"})},
        {"match2id": "g_0002", "match2bracketdata": {"type": bracket_type}},
    ]


class TestCoercion:

    @pytest.mark.parametrize("target", ["bracket", "matchlist"])
    @pytest.mark.parametrize("source", ["bracket", "matchlist"])
    def test_idempotent(self, source, target):
        once = coerce_match_records_to_type(_records(source), target)
        twice = coerce_match_records_to_type(once, target)
        assert twice == once

    def test_first_bracket_match_gets_header(self):
        coerced = coerce_match_records_to_type(_records("matchlist"), "bracket")
        assert coerced[0]["match2bracketdata"]["header"] == "Day 1"
        assert "header" not in coerced[1]["match2bracketdata"]
        assert all(read_bracket_type(r) == "bracket" for r in coerced)

    def test_default_header(self):
        coerced = coerce_match_records_to_type([{"match2id": "g_0001"}], "bracket")
        assert coerced[0]["match2bracketdata"] == {"type": "bracket", "header": "Matches"}

    def test_inputs_not_mutated(self):
        records = _records("bracket")
        coerce_match_records_to_type(records, "matchlist")
        assert records == _records("bracket")

    def test_read_bracket_type_defaults_to_matchlist(self):
        assert read_bracket_type({"match2id": "g_0001"}) == "matchlist"
        assert read_bracket_type({"match2bracketdata": {"type": "swiss"}}) == "matchlist"


# ---------------------------------------------------------------------------
# Empty tables stored as "[]"
# ---------------------------------------------------------------------------


class TestEmptyTables:

    def _record(self):
        return {
            "match2id": "g_0001",
            "match2bracketdata": "[]",
            "extradata": "[]",
            "links": "[]",
            "stream": "[]",
            "match2opponents": json.dumps([{"type": "team", "name": "Alpha", "extradata": "[]"}]),
            "match2games": json.dumps([{"map": "Dust", "extradata": "[]", "participants": "[]", "scores": "[]"}]),
        }

    def test_empty_tables_read_as_empty_containers(self):
        match = match_from_record(self._record(), "g")

        assert isinstance(match.bracket_data, MatchlistBracketData)
        assert match.extradata == {}
        assert match.links == {}
        assert match.stream == {}
        assert match.comment is None
        assert match.opponents[0].extradata == {}
        assert match.opponents[0].advance_bg is None
        assert match.games[0].extradata == {}
        assert match.games[0].participants == {}
        assert match.games[0].scores == []

    def test_structured_empty_list_reads_as_dict(self):
        record = self._record()
        record["extradata"] = []
        assert match_from_record(record, "g").extradata == {}

    def test_empty_object_reads_as_list(self):
        assert parse_or_copy("{}", "match2games", default=list) == []

    def test_coerce_empty_bracket_data(self):
        coerced = coerce_match_records_to_type([{"match2id": "g_0001", "match2bracketdata": "[]"}], "bracket")
        assert coerced[0]["match2bracketdata"] == {"type": "bracket", "header": "Matches"}
        assert read_bracket_type({"match2bracketdata": "[]"}) == "matchlist"

    @pytest.mark.parametrize("value", ['["x"]', "5", '"text"', ["x"]])
    def test_wrong_shape_raises(self, value):
        record = self._record()
        record["extradata"] = value
        with pytest.raises(MatchRecordDecodeError) as exc_info:
            match_from_record(record, "g")
        assert exc_info.value.field == "extradata"
        assert exc_info.value.match_id == "g_0001"
