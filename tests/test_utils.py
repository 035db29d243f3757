"""Tests for the tabular parser, the column resolver and numeric coercion."""

from __future__ import annotations

import csv

import pytest

from inventory_sync import utils
from inventory_sync.errors import TableParseError
from inventory_sync.utils import find_column_value, guess_delimiter, parse_table, read_text, to_int, to_text


def test_parse_table_comma_rows_keyed_by_header() -> None:
    """Rows should be keyed by header labels and keep input order."""
    rows = parse_table("sku,msku\nA1,M1\nA2,M2\n")
    assert rows == [{"sku": "A1", "msku": "M1"}, {"sku": "A2", "msku": "M2"}]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("SKU\tQty\nA1\t3\n", "\t"),
        ("SKU|Qty\nA1|3\n", "|"),
        ("SKU;Price\nA1;1,5\nA2;2,5\n", ";"),
    ],
)
def test_guess_delimiter_picks_the_consistent_candidate(text: str, expected: str) -> None:
    """The delimiter giving a stable multi-column split should win."""
    delimiter, _ = guess_delimiter(text)
    assert delimiter == expected


def test_parse_table_types_numeric_cells() -> None:
    """Integers and decimals are typed; leading-zero identifiers stay text."""
    rows = parse_table("sku,qty,price,code\nA1,3,12.50,007\n")
    assert rows == [{"sku": "A1", "qty": 3, "price": 12.5, "code": "007"}]


def test_parse_table_drops_empty_cells_and_blank_lines() -> None:
    """Empty cells are absent from the row mapping; blank lines disappear."""
    rows = parse_table("sku,msku,status\nA1,,Active\n\n,,\nA2,M2,\n")
    assert rows == [{"sku": "A1", "status": "Active"}, {"sku": "A2", "msku": "M2"}]


def test_parse_table_keeps_quoted_delimiters() -> None:
    rows = parse_table('sku,Product Name\nA1,"Mug, Large"\n')
    assert rows == [{"sku": "A1", "Product Name": "Mug, Large"}]


def test_parse_table_ignores_fields_beyond_the_header() -> None:
    rows = parse_table("sku,msku\nA1,M1,extra\n")
    assert rows == [{"sku": "A1", "msku": "M1"}]


def test_parse_table_empty_and_header_only_inputs() -> None:
    assert parse_table("") == []
    assert parse_table("   \n") == []
    assert parse_table("sku,msku\n") == []


def test_parse_table_raises_for_untokenizable_text() -> None:
    """An unterminated quote cannot be tokenized and surfaces as a parse failure."""
    with pytest.raises(TableParseError) as excinfo:
        parse_table('sku,name\nA1,"Unclosed\n')
    assert excinfo.value.reason == "parse_failure"


def test_parse_table_strips_byte_order_mark() -> None:
    rows = parse_table("\ufeffsku,msku\nA1,M1\n")
    assert rows == [{"sku": "A1", "msku": "M1"}]


def test_read_text_falls_back_to_latin1(tmp_path) -> None:
    path = tmp_path / "orders.csv"
    path.write_bytes("sku,name\nA1,Caf\xe9\n".encode("latin-1"))
    assert read_text(path) == "sku,name\nA1,Café\n"


def test_find_column_value_returns_first_non_empty_alias() -> None:
    """Aliases are tried in order; missing, None and empty values are skipped."""
    row = {"SKU": "", "Sku": None, "sku": "A1", "msku": "M1"}
    assert find_column_value(row, ["SKU", "Sku", "sku", "msku"]) == "A1"
    assert find_column_value(row, ["missing"]) is None


def test_find_column_value_keeps_zero() -> None:
    """Zero is a real value, not an empty one."""
    assert find_column_value({"qty": 0}, ["qty"]) == 0


@pytest.mark.parametrize(
    ("value", "expected"),
    [(5, 5), (4.9, 4), ("12", 12), ("7 units", 7), ("-3", -3), ("abc", 0), (None, 0), (float("nan"), 0)],
)
def test_to_int_is_total(value, expected: int) -> None:
    assert to_int(value) == expected


def test_to_int_uses_supplied_default() -> None:
    assert to_int("n/a", 1) == 1
    assert to_int(None, 1) == 1


def test_parse_table_keeps_columns_around_oversized_cells() -> None:
    """A cell longer than the csv module's default field limit must not collapse the row."""
    notes = "x" * 140_000
    rows = parse_table(f"SKU,Quantity,Status,Notes\nA1,4,Shipped,{notes}\nA1,1,Shipped,short\n")

    assert [(r["SKU"], r["Quantity"], r["Status"]) for r in rows] == [("A1", 4, "Shipped"), ("A1", 1, "Shipped")]
    assert len(rows[0]["Notes"]) == 140_000
    assert csv.field_size_limit() == 131072


def test_guess_delimiter_raises_when_no_candidate_tokenizes(monkeypatch: pytest.MonkeyPatch) -> None:
    def untokenizable(text: str, delimiter: str) -> list[int]:
        raise csv.Error("field larger than field limit")

    monkeypatch.setattr(utils, "_field_counts", untokenizable)

    with pytest.raises(TableParseError) as excinfo:
        parse_table("SKU,Quantity\nA1,1\n")
    assert excinfo.value.reason == "parse_failure"


def test_parse_table_suffixes_duplicate_headers() -> None:
    """Repeated labels keep every column instead of overwriting the first."""
    rows = parse_table("SKU,Quantity,SKU,SKU\nA1,2,B1,C1\n")
    assert rows == [{"SKU": "A1", "Quantity": 2, "SKU_1": "B1", "SKU_2": "C1"}]


@pytest.mark.parametrize(
    ("cell", "expected"),
    [("12E4", "120000"), ("100.0", "100"), ("2.5", "2.5"), ("1001", "1001"), ("007", "007")],
)
def test_to_text_renders_numeric_identifiers_without_float_suffix(cell: str, expected: str) -> None:
    (row,) = parse_table(f"sku,qty\n{cell},1\n")
    assert to_text(row["sku"]) == expected
