"""
Tests for the multi-list search engine.
"""

import re

import pytest

from kvlists.engine.search import auto_format_value, compile_pattern, search
from kvlists.models import InvalidPatternError, NotFoundError, Row


class TestSearch:
    """Tests for search() on every backend."""

    def test_pattern_match(self, fruit_store):
        """Test /ap/ over lists a and b finds only "apple"."""
        result = search(fruit_store, ["a", "b"], re.compile("ap"), False, 0, 10)

        assert result.total_results == 1
        assert len(result.rows) == 1
        hit = result.rows[0]
        assert hit.list_name == "a"
        assert hit.row == Row("1", "apple")
        assert hit.match == "ap"

    def test_no_pattern_matches_everything(self, store):
        """Test no pattern over all lists counts every row."""
        store.create_list("a")
        store.create_list("b")
        for i in range(2):
            store.create_row("a", Row(str(i), "x"))
        for i in range(3):
            store.create_row("b", Row(str(i), "y"))

        result = search(store, [], None, False, 0, 10)

        assert result.total_results == 5
        assert [(r.list_name, r.row.key_str) for r in result.rows] == [
            ("a", "0"), ("a", "1"), ("b", "0"), ("b", "1"), ("b", "2"),
        ]
        assert all(r.match == "" for r in result.rows)

    def test_empty_pattern_is_no_pattern(self, fruit_store):
        """Test an empty pattern matches every row."""
        assert search(fruit_store, None, "", False, 0, 10).total_results == 3
        assert search(fruit_store, None, re.compile(""), True, 0, 10).total_results == 3

    def test_exclude_matches(self, fruit_store):
        """Test exclude keeps only rows that do not match."""
        result = search(fruit_store, ["a", "b"], "ap", True, 0, 10)

        assert result.total_results == 2
        assert [r.row.value for r in result.rows] == [b"pear", b"grape"]
        assert all(r.match == "" for r in result.rows)

    def test_string_pattern_compiled(self, fruit_store):
        """Test regex source text is accepted."""
        result = search(fruit_store, None, "^gr", False, 0, 10)

        assert result.total_results == 1
        assert result.rows[0].list_name == "b"
        assert result.rows[0].match == "gr"

    def test_list_order_respected(self, fruit_store):
        """Test lists are scanned in the order given."""
        result = search(fruit_store, ["b", "a"], None, False, 0, 10)

        assert [r.list_name for r in result.rows] == ["b", "a", "a"]

    def test_total_independent_of_page(self, store):
        """Test total_results does not depend on the page window."""
        store.create_list("a")
        store.create_list("b")
        for i in range(17):
            store.create_row("a", Row(f"{i:02d}", "match" if i % 2 else "other"))
        for i in range(9):
            store.create_row("b", Row(f"{i:02d}", "match"))

        totals = {
            search(store, ["a", "b"], "match", False, page, size).total_results
            for page in range(4)
            for size in [1, 4, 10]
        }

        assert totals == {8 + 9}

    def test_pages_use_global_rank(self, store):
        """Test matches are paged by global rank across lists."""
        store.create_list("a")
        store.create_list("b")
        for i in range(4):
            store.create_row("a", Row(f"{i}", f"hit a{i}"))
            store.create_row("a", Row(f"{i}x", "miss"))
        for i in range(4):
            store.create_row("b", Row(f"{i}", f"hit b{i}"))

        pages = [
            [r.row.value_str for r in search(store, ["a", "b"], "hit", False, p, 3).rows]
            for p in range(3)
        ]

        assert pages == [
            ["hit a0", "hit a1", "hit a2"],
            ["hit a3", "hit b0", "hit b1"],
            ["hit b2", "hit b3"],
        ]

    def test_page_past_end(self, fruit_store):
        """Test a page past the last match is empty but still counts."""
        result = search(fruit_store, None, None, False, 5, 10)

        assert result.total_results == 3
        assert result.rows == []

    def test_unknown_list(self, fruit_store):
        """Test an unknown list name reports NotFound."""
        with pytest.raises(NotFoundError):
            search(fruit_store, ["a", "missing"], None, False, 0, 10)

    def test_invalid_pattern(self, fruit_store):
        """Test an uncompilable pattern is rejected."""
        with pytest.raises(InvalidPatternError):
            search(fruit_store, None, "(", False, 0, 10)

    def test_invalid_window(self, fruit_store):
        """Test invalid pagination arguments are rejected."""
        with pytest.raises(ValueError):
            search(fruit_store, None, None, False, 0, 0)

    def test_json_values_formatted_for_display(self, store):
        """Test JSON values get a pretty display copy; stored value untouched."""
        store.create_list("docs")
        store.create_row("docs", Row("1", '{"a":1,"b":[1,2]}'))
        store.create_row("docs", Row("2", "plain text"))

        result = search(store, ["docs"], None, False, 0, 10)

        assert result.rows[0].display_value == '{\n\t"a": 1,\n\t"b": [\n\t\t1,\n\t\t2\n\t]\n}'
        assert result.rows[0].row.value == b'{"a":1,"b":[1,2]}'
        assert result.rows[1].display_value == "plain text"
        assert store.read_row("docs", "1").value == b'{"a":1,"b":[1,2]}'

    def test_empty_store(self, store):
        """Test searching an empty store."""
        result = search(store, None, None, False, 0, 10)

        assert result.total_results == 0
        assert result.rows == []


class TestHelpers:
    """Tests for pattern compilation and value formatting."""

    def test_compile_pattern(self):
        """Test pattern normalization."""
        assert compile_pattern(None) is None
        assert compile_pattern("") is None
        assert compile_pattern("a+").pattern == "a+"
        compiled = re.compile("b")
        assert compile_pattern(compiled) is compiled

    def test_auto_format_json(self):
        """Test JSON text is re-indented with tabs."""
        assert auto_format_value(b'{"k":"v"}') == '{\n\t"k": "v"\n}'

    def test_auto_format_preserves_key_order(self):
        """Test object key order is kept."""
        assert auto_format_value('{"z":1,"a":2}') == '{\n\t"z": 1,\n\t"a": 2\n}'

    def test_auto_format_non_json(self):
        """Test non-JSON values are returned unchanged."""
        assert auto_format_value(b"{not json") == "{not json"
        assert auto_format_value("") == ""

    def test_auto_format_scalar_json(self):
        """Test JSON scalars are valid and stay as they are."""
        assert auto_format_value("42") == "42"
        assert auto_format_value('"hi"') == '"hi"'

    def test_auto_format_keeps_duplicate_keys(self):
        """Test repeated object keys are all shown."""
        assert auto_format_value('{"a":1.10,"a":2}') == '{\n\t"a": 1.10,\n\t"a": 2\n}'

    def test_auto_format_keeps_number_literals(self):
        """Test numbers are shown exactly as stored."""
        assert auto_format_value('[1.10, 1e2, 1E400, -0]') == '[\n\t1.10,\n\t1e2,\n\t1E400,\n\t-0\n]'

    def test_auto_format_rejects_non_json_constants(self):
        """Test NaN and Infinity are not treated as JSON."""
        assert auto_format_value("NaN") == "NaN"
        assert auto_format_value('{"a": Infinity}') == '{"a": Infinity}'
        assert auto_format_value("[-Infinity]") == "[-Infinity]"

    def test_auto_format_strings_untouched(self):
        """Test whitespace and punctuation inside strings are kept."""
        value = ' {"k" : "a, b: {c}\\" [ ]", "e":{}, "f":[ ]} '
        assert auto_format_value(value) == '{\n\t"k": "a, b: {c}\\" [ ]",\n\t"e": {},\n\t"f": []\n}'
