"""Tests for match id encodings and stored index tables."""

import pytest

from matchgroup.services.match_ids import (
    index_table_from_record,
    index_table_to_record,
    is_bracket_reset_match_id,
    match_id_from_key,
    match_id_to_key,
    section_index_to_string,
    split_match_id,
)


class TestMatchIdToKey:

    def test_bracket_id(self):
        assert match_id_to_key("R01-M003") == "R1M3"

    def test_bracket_id_multi_digit(self):
        assert match_id_to_key("R12-M104") == "R12M104"

    def test_matchlist_id(self):
        assert match_id_to_key("0005") == "M5"

    @pytest.mark.parametrize("token", ["RxMBR", "RxMTP"])
    def test_special_tokens_pass_through(self, token):
        assert match_id_to_key(token) == token

    @pytest.mark.parametrize("match_id", ["", "R1M3", "R01M003", "abc", "R01-M"])
    def test_unrecognized(self, match_id):
        assert match_id_to_key(match_id) is None


class TestMatchIdFromKey:

    def test_bracket_key(self):
        assert match_id_from_key("R1M3") == "R01-M003"

    def test_matchlist_key(self):
        assert match_id_from_key("M5") == "0005"

    def test_bare_number_string(self):
        assert match_id_from_key("5") == "0005"

    def test_int(self):
        assert match_id_from_key(12) == "0012"

    @pytest.mark.parametrize("token", ["RxMBR", "RxMTP"])
    def test_special_tokens_pass_through(self, token):
        assert match_id_from_key(token) == token

    def test_unrecognized(self):
        assert match_id_from_key("R01-M003") is None


@pytest.mark.parametrize("match_id", ["R01-M001", "R03-M012", "0001", "0123", "RxMBR", "RxMTP"])
def test_record_form_survives_key_form(match_id):
    assert match_id_from_key(match_id_to_key(match_id)) == match_id


@pytest.mark.parametrize("key", ["R1M1", "R3M12", "M1", "M123", "RxMBR"])
def test_key_form_survives_record_form(key):
    assert match_id_to_key(match_id_from_key(key)) == key


class TestSplitMatchId:

    def test_split(self):
        assert split_match_id("h5HXaqbSVP_R02-M002") == ("h5HXaqbSVP", "R02-M002")

    def test_last_underscore_separates(self):
        assert split_match_id("my_group_0003") == ("my_group", "0003")

    def test_no_underscore(self):
        assert split_match_id("R02-M002") is None


def test_is_bracket_reset_match_id():
    assert is_bracket_reset_match_id("abc_RxMBR")
    assert not is_bracket_reset_match_id("abc_RxMTP")


class TestIndexTables:

    def test_from_record_shifts_index_fields(self):
        assert index_table_from_record({"roundIndex": 0, "sectionIndex": 2, "depth": 1}) == {
            "roundIndex": 1,
            "sectionIndex": 3,
            "depth": 1,
        }

    def test_to_record_shifts_back(self):
        assert index_table_to_record({"childMatchIndex": 1, "opponentIndex": 2}) == {
            "childMatchIndex": 0,
            "opponentIndex": 1,
        }

    def test_non_integer_values_untouched(self):
        table = {"rootIndex": None, "matchIndexInRound": True, "header": "x"}
        assert index_table_from_record(table) == table

    def test_source_not_mutated(self):
        record = {"roundIndex": 0}
        index_table_from_record(record)
        assert record == {"roundIndex": 0}


@pytest.mark.parametrize(
    "section_index,section_count,expected",
    [(1, 2, "upper"), (2, 2, "lower"), (2, 3, "mid"), (1, 1, "upper")],
)
def test_section_index_to_string(section_index, section_count, expected):
    assert section_index_to_string(section_index, section_count) == expected


def test_numeric_matchlist_id():
    assert match_id_to_key(5) == "M5"
    assert match_id_from_key(match_id_to_key(12)) == "0012"
