"""
Tests for CSV profiling and column extraction.
"""
import os
import sys
import time
from unittest.mock import patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.exceptions import FileReadError, NotFoundError, ParseError, ReadTimeoutError
from file_handling.csv_utils import (
    CATEGORY_MAX_DISTINCT,
    CsvColumnExtractor,
    CsvProfiler,
    get_csv_columns,
    get_csv_profile,
    parse_header_line,
)


def write_csv(tmp_path, content, name="data.csv"):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return str(path)


def column_csv(tmp_path, header, values):
    return write_csv(tmp_path, header + "\n" + "\n".join(values) + "\n")


class TestHeaderParsing:
    """Test header tokenization."""

    def test_plain(self):
        assert parse_header_line("a,b,c") == ["a", "b", "c"]

    def test_quoted(self):
        assert parse_header_line('"name","age",plain') == ["name", "age", "plain"]

    def test_only_one_pair_stripped(self):
        assert parse_header_line('""double""') == ['"double"']

    def test_unbalanced_quotes(self):
        assert parse_header_line('"left,right"') == ["left", "right"]

    def test_empty_token_kept(self):
        assert parse_header_line("a,,c") == ["a", "", "c"]


class TestCategoryBoundary:
    """A column is category iff it has at most 5 distinct values."""

    def test_threshold_constant(self):
        assert CATEGORY_MAX_DISTINCT == 5

    def test_three_distinct(self, tmp_path):
        path = column_csv(tmp_path, "color", ["red", "blue", "red", "green", "blue", "red"])
        profile = CsvProfiler().profile(path)
        assert profile.columns == [{"header": "color", "type": "category"}]
        assert profile.rows == 6

    def test_exactly_five_distinct(self, tmp_path):
        path = column_csv(tmp_path, "v", ["1", "2", "3", "4", "5", "1", "2"])
        assert CsvProfiler().profile(path).columns[0]["type"] == "category"

    def test_six_distinct(self, tmp_path):
        path = column_csv(tmp_path, "v", ["1", "2", "3", "4", "5", "6"])
        assert CsvProfiler().profile(path).columns[0]["type"] == "numeric"

    def test_boundary_across_chunks(self, tmp_path):
        path = column_csv(tmp_path, "v", ["1", "1", "2", "2", "3", "3", "4", "4", "5", "5", "6"])
        assert CsvProfiler(chunk_size=2).profile(path).columns[0]["type"] == "numeric"

        path = column_csv(tmp_path, "v", ["1", "1", "2", "2", "3", "3", "4", "4", "5", "5", "1"])
        assert CsvProfiler(chunk_size=2).profile(path).columns[0]["type"] == "category"

    def test_many_distinct_in_one_chunk(self, tmp_path):
        path = column_csv(tmp_path, "id", [str(i) for i in range(1000)])
        profile = CsvProfiler(chunk_size=100).profile(path)
        assert profile.columns[0]["type"] == "numeric"
        assert profile.rows == 1000

    def test_values_are_raw_strings(self, tmp_path):
        # 1, 1.0, 01, " 1" are all different raw values
        path = column_csv(tmp_path, "v", ["1", "1.0", "01", " 1", "1e0", "+1"])
        assert CsvProfiler().profile(path).columns[0]["type"] == "numeric"

    def test_empty_strings_count_as_one_value(self, tmp_path):
        path = column_csv(tmp_path, "a,b", ["x,", "y,", "z,", "w,", "v,", "u,"])
        profile = CsvProfiler().profile(path)
        assert [c["type"] for c in profile.columns] == ["numeric", "category"]

    def test_mixed_columns(self, tmp_path):
        rows = [f"{i},{['a', 'b'][i % 2]},{i * 1.5}" for i in range(20)]
        path = column_csv(tmp_path, '"id","group","score"', rows)
        profile = get_csv_profile(path)
        assert profile.to_dict() == {
            "columns": [
                {"header": "id", "type": "numeric"},
                {"header": "group", "type": "category"},
                {"header": "score", "type": "numeric"},
            ],
            "rows": 20,
        }


class TestRowCount:
    """rows counts data lines, header excluded."""

    @pytest.mark.parametrize("n", [0, 1, 7, 250])
    def test_row_count(self, tmp_path, n):
        path = column_csv(tmp_path, "a,b", [f"{i},{i}" for i in range(n)]) if n else write_csv(tmp_path, "a,b\n")
        assert CsvProfiler(chunk_size=50).profile(path).rows == n

    def test_no_trailing_newline(self, tmp_path):
        path = write_csv(tmp_path, "a\n1\n2")
        assert CsvProfiler().profile(path).rows == 2

    def test_crlf_line_endings(self, tmp_path):
        path = write_csv(tmp_path, "a,b\r\n1,2\r\n3,4\r\n")
        profile = CsvProfiler().profile(path)
        assert profile.rows == 2
        assert [c["header"] for c in profile.columns] == ["a", "b"]

    def test_empty_file(self, tmp_path):
        path = write_csv(tmp_path, "")
        profile = CsvProfiler().profile(path)
        assert profile.columns == []
        assert profile.rows == 0

    def test_header_only_columns_are_category(self, tmp_path):
        path = write_csv(tmp_path, "a,b\n")
        profile = CsvProfiler().profile(path)
        assert [c["type"] for c in profile.columns] == ["category", "category"]


class TestProfilerShapes:
    """Rows narrower or wider than the header."""

    def test_short_rows_leave_holes(self, tmp_path):
        path = write_csv(tmp_path, "a,b,c\n1,2,3\n4,5\n")
        profile = CsvProfiler().profile(path)
        assert profile.rows == 2
        assert len(profile.columns) == 3

    def test_header_wider_than_data(self, tmp_path):
        path = write_csv(tmp_path, "a,b,c\n1,2\n3,4\n")
        profile = CsvProfiler().profile(path)
        assert [c["header"] for c in profile.columns] == ["a", "b", "c"]
        assert profile.rows == 2

    def test_ragged_rows_after_short_first_row(self, tmp_path):
        path = write_csv(tmp_path, "a,b,c\n1,2\n3,4,5\n")
        profile = CsvProfiler().profile(path)
        assert profile.rows == 2
        assert [c["header"] for c in profile.columns] == ["a", "b", "c"]

    def test_fields_past_header_ignored(self, tmp_path):
        rows = [f"x,{i},{i},{i}" for i in range(10)]
        path = column_csv(tmp_path, "kind,value", rows)
        profile = CsvProfiler(chunk_size=3).profile(path)
        assert profile.rows == 10
        assert profile.to_dict()["columns"] == [
            {"header": "kind", "type": "category"},
            {"header": "value", "type": "numeric"},
        ]

    def test_quoted_values_with_commas(self, tmp_path):
        path = write_csv(tmp_path, 'name,city\n"Doe, Jane","Paris, FR"\nBob,Rome\n')
        profile = CsvProfiler().profile(path)
        assert profile.rows == 2
        assert [c["header"] for c in profile.columns] == ["name", "city"]


class TestProfilerErrors:
    """Failures are all-or-nothing."""

    def test_malformed_framing(self, tmp_path):
        path = write_csv(tmp_path, 'a,b\n1,2\n"3"x,4\n')
        with pytest.raises(ParseError):
            CsvProfiler().profile(path)

    def test_unterminated_quote(self, tmp_path):
        path = write_csv(tmp_path, 'a,b\n1,"2\n3,4\n')
        with pytest.raises(ParseError):
            CsvProfiler().profile(path)

    def test_malformed_framing_in_later_chunk(self, tmp_path):
        rows = [f"{i},{i}" for i in range(100)] + ['"x"y,z']
        path = column_csv(tmp_path, "a,b", rows)
        with pytest.raises(ParseError):
            CsvProfiler(chunk_size=10).profile(path)

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "latin1.csv"
        path.write_bytes("name\ncaf\xe9\n".encode("latin-1"))
        with pytest.raises(ParseError):
            CsvProfiler().profile(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            CsvProfiler().profile(str(tmp_path / "missing.csv"))

    def test_directory_is_read_error(self, tmp_path):
        with pytest.raises(FileReadError):
            CsvProfiler().profile(str(tmp_path))

    def test_read_timeout(self, tmp_path):
        path = write_csv(tmp_path, "a\n1\n")

        def stalled(file_path, cancelled):
            time.sleep(0.5)

        with patch.object(CsvProfiler, "_profile", side_effect=stalled):
            with pytest.raises(ReadTimeoutError):
                CsvProfiler(read_timeout=0.05).profile(path)

    def test_timeout_is_read_error(self):
        assert issubclass(ReadTimeoutError, FileReadError)


class TestColumnExtraction:
    """Test extraction of selected columns."""

    def test_reorders_columns(self, tmp_path):
        path = write_csv(tmp_path, "1,2,3\n4,5,6\n")
        assert CsvColumnExtractor().extract(path, [2, 0]) == [("3", "1"), ("6", "4")]

    def test_header_line_is_first_row(self, tmp_path):
        path = write_csv(tmp_path, "x,y,z\n1,2,3\n")
        assert get_csv_columns(path, [1]) == [("y",), ("2",)]

    def test_out_of_range_is_hole(self, tmp_path):
        path = write_csv(tmp_path, "1,2,3\n4,5,6\n")
        assert CsvColumnExtractor().extract(path, [0, 3, -1]) == [("1", None, None), ("4", None, None)]

    def test_repeated_indices(self, tmp_path):
        path = write_csv(tmp_path, "1,2\n3,4\n")
        assert CsvColumnExtractor().extract(path, [1, 1, 0]) == [("2", "2", "1"), ("4", "4", "3")]

    def test_short_row_hole(self, tmp_path):
        path = write_csv(tmp_path, "a,b,c\n1,2\n")
        assert CsvColumnExtractor().extract(path, [2, 0]) == [("c", "a"), (None, "1")]

    def test_row_wider_than_first_row(self, tmp_path):
        path = write_csv(tmp_path, "a,b\n1,2,3\n")
        assert CsvColumnExtractor().extract(path, [0, 2]) == [("a", None), ("1", "3")]

    def test_ragged_rows(self, tmp_path):
        path = write_csv(tmp_path, "a,b,c\n1,2\n3,4,5,6\n")
        rows = CsvColumnExtractor().extract(path, [3, 2, 0])
        assert rows == [(None, "c", "a"), (None, None, "1"), ("6", "5", "3")]

    def test_source_order_across_chunks(self, tmp_path):
        path = write_csv(tmp_path, "".join(f"{i},{i * 2}\n" for i in range(25)))
        rows = CsvColumnExtractor(chunk_size=4).extract(path, [1])
        assert rows == [(str(i * 2),) for i in range(25)]

    def test_quoted_field_unquoted(self, tmp_path):
        path = write_csv(tmp_path, 'name,city\n"Doe, Jane",Paris\n')
        assert CsvColumnExtractor().extract(path, [0]) == [("name",), ("Doe, Jane",)]

    def test_empty_file(self, tmp_path):
        path = write_csv(tmp_path, "")
        assert CsvColumnExtractor().extract(path, [0]) == []

    def test_no_columns_requested(self, tmp_path):
        path = write_csv(tmp_path, "1,2\n3,4\n")
        assert CsvColumnExtractor().extract(path, []) == [(), ()]

    def test_malformed_framing(self, tmp_path):
        path = write_csv(tmp_path, '1,2\n"3"x,4\n')
        with pytest.raises(ParseError):
            CsvColumnExtractor().extract(path, [0])

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            CsvColumnExtractor().extract(str(tmp_path / "missing.csv"), [0])

    def test_concurrent_extractions_independent(self, tmp_path):
        from concurrent.futures import ThreadPoolExecutor

        path = write_csv(tmp_path, "".join(f"{i},{i + 1}\n" for i in range(200)))
        extractor = CsvColumnExtractor(chunk_size=7)
        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(lambda cols: extractor.extract(path, cols), [[0], [1], [0], [1]]))

        assert results[0] == results[2] == [(str(i),) for i in range(200)]
        assert results[1] == results[3] == [(str(i + 1),) for i in range(200)]
