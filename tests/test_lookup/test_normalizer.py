"""Tests for Normalizer: JSON payload shapes → LookupTable."""

import pytest

from sdtmacro.lookup import LookupTable, make_raw_record, normalize, sort_keys_numerically


class TestResultShape:
    """Payloads of the form {"result": [...]}."""

    def test_records_indexed_three_ways(self):
        """Each result item is indexed by id, idx and Name."""
        table = normalize({
            "result": [
                {"id": "TempOutside", "idx": "12", "Name": "Outside", "Data": "3.4 C"},
                {"id": "Power", "idx": 7, "Name": "Meter", "Value": 2345.67},
            ]
        })

        assert table is not None
        assert table.by_id["TempOutside"]["Data"] == "3.4 C"
        assert table.by_idx[12]["id"] == "TempOutside"
        assert table.by_idx[7]["id"] == "Power"
        assert table.by_name["Meter"]["Value"] == 2345.67

    def test_record_shared_between_indices(self):
        """The same Record object sits in every index (not copied)."""
        table = normalize({"result": [{"id": "a", "idx": 1, "Name": "A"}]})

        assert table.by_id["a"] is table.by_idx[1]
        assert table.by_id["a"] is table.by_name["A"]

    def test_key_case_variants(self):
        """Id / Idx / name variants are accepted."""
        table = normalize({"result": [{"Id": "x", "Idx": "3", "name": "Ex"}]})

        assert "x" in table.by_id
        assert 3 in table.by_idx
        assert "Ex" in table.by_name

    def test_exact_case_wins_over_variant(self):
        """When both spellings exist, the exact one is used."""
        table = normalize({"result": [{"Name": "Upper", "name": "lower"}]})

        assert list(table.by_name) == ["Upper"]

    def test_non_integer_idx_not_indexed(self):
        """idx must match the integer pattern to enter by_idx."""
        table = normalize({"result": [
            {"id": "a", "idx": "abc"},
            {"id": "b", "idx": "1.5"},
            {"id": "c", "idx": "-4"},
        ]})

        assert table.by_idx == {-4: table.by_id["c"]}
        assert set(table.by_id) == {"a", "b", "c"}

    def test_missing_keys_only_skip_their_index(self):
        """A record without idx is reachable by id and Name only."""
        table = normalize({"result": [{"id": "a", "Name": "A", "Value": 1}]})

        assert table.by_idx == {}
        assert table.by_id["a"] is table.by_name["A"]

    def test_numeric_id_indexed_as_string(self):
        """Numeric ids are indexed under their text so ~e5~ finds them."""
        table = normalize({"result": [{"id": 5, "Value": "x"}]})

        assert "5" in table.by_id

    def test_non_mapping_items_skipped(self):
        """Scalars or lists inside result are ignored."""
        table = normalize({"result": [1, "two", [3], {"id": "ok"}]})

        assert list(table.by_id) == ["ok"]

    def test_empty_result_is_valid_but_empty(self):
        """An empty result list is an empty table, not 'no data'."""
        table = normalize({"result": []})

        assert isinstance(table, LookupTable)
        assert table.has_data is False


class TestRawShape:
    """Payloads of the form {"raw": {...}}."""

    def test_raw_items_synthesized(self):
        """Raw pairs become id/idx/Name/Value/Data records."""
        table = normalize({"raw": {"1": 23.5, "2": "On"}})

        first = table.by_id["1"]
        assert first == {"id": "1", "idx": 1, "Name": "Key_1", "Value": 23.5, "Data": "23.5"}
        assert table.by_idx[2]["Name"] == "Key_2"
        assert table.by_name["Key_2"]["Value"] == "On"

    def test_non_integer_key_has_no_idx(self):
        """A non-numeric raw key yields a record without idx."""
        table = normalize({"raw": {"temp": 1}})

        assert "idx" not in table.by_id["temp"]
        assert table.by_idx == {}

    def test_null_value_has_empty_data(self):
        """A null raw value renders as empty Data."""
        table = normalize({"raw": {"x": None}})

        assert table.by_id["x"]["Data"] == ""
        assert table.by_id["x"]["Value"] is None

    def test_negative_integer_key(self):
        """Negative integer keys are indexed as integers."""
        table = normalize({"raw": {"-3": "minus"}})

        assert table.by_idx[-3]["Value"] == "minus"


class TestRawRootShape:
    """Flat key/value payloads without result or raw."""

    def test_flat_mapping_treated_as_raw(self):
        """Top-level scalars become raw records."""
        table = normalize({"1": 23.5, "2": "On"})

        assert table.by_id["1"]["Data"] == "23.5"
        assert table.by_name["Key_2"]["Value"] == "On"

    def test_containers_skipped(self):
        """Nested mappings and lists are dropped silently."""
        table = normalize({"a": 1, "nested": {"x": 1}, "list": [1, 2], "flag": True})

        assert set(table.by_id) == {"a", "flag"}
        assert table.by_id["flag"]["Data"] == "true"


class TestUnrecognizedShapes:
    """Payloads that normalize to 'no data'."""

    @pytest.mark.parametrize("payload", [
        [1, 2, 3],
        "text",
        42,
        None,
        {"result": "not a list"},
        {"result": {"id": "x"}},
        {"raw": [1, 2]},
    ])
    def test_returns_none(self, payload):
        """Wrong top-level types return None."""
        assert normalize(payload) is None

    def test_valid_raw_used_when_result_is_malformed(self):
        """A malformed result key still lets a valid raw mapping through."""
        table = normalize({"result": "x", "raw": {"1": 2}})

        assert table is not None
        assert table.by_idx[1]["Value"] == 2

    def test_malformed_result_alone_is_no_data(self):
        """A malformed result key blocks the raw-root fallback."""
        assert normalize({"result": "x", "other": 1}) is None


class TestHelpers:
    """Key sorting and raw record synthesis."""

    def test_numeric_keys_sort_numerically_first(self):
        """Integers first in numeric order, then the rest lexicographically."""
        assert sort_keys_numerically(["b", "10", "2", "a", "-1"]) == ["-1", "2", "10", "a", "b"]

    def test_make_raw_record_stringifies_data(self):
        """Data is the display form of Value."""
        record = make_raw_record("5", False)

        assert record["idx"] == 5
        assert record["Data"] == "false"
