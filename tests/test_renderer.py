from decimal import Decimal

import pytest

from conftest import make_rows
from core.renderer import HANDLING_MENU, NO_RESULTS_MESSAGE, format_cell, render

COLUMNS = ["ticker", "sector", "pe_ratio"]


def data_lines(text):
    """Table body lines (skipping header and separator) from every fenced block."""
    lines = []
    for block in text.split("```")[1::2]:
        body = block.strip("\n").splitlines()
        lines.extend(body[2:])
    return lines


def test_no_rows():
    assert render([], COLUMNS) == NO_RESULTS_MESSAGE
    assert render(None, COLUMNS) == "No results found."


def test_five_rows_full_table_without_caption():
    text = render(make_rows(5), COLUMNS)
    assert text.startswith("```\nticker | sector | pe_ratio\n--- | --- | ---\n")
    assert len(data_lines(text)) == 5
    assert "Complete dataset" not in text
    assert "Large Dataset" not in text


def test_six_rows_full_table_with_caption():
    text = render(make_rows(6), COLUMNS)
    assert text.startswith("Complete dataset (6 rows):\n\n```")
    assert len(data_lines(text)) == 6


def test_twenty_rows_still_complete():
    text = render(make_rows(20), COLUMNS)
    assert text.startswith("Complete dataset (20 rows):")
    assert len(data_lines(text)) == 20


def test_twenty_one_rows_sampled():
    text = render(make_rows(21), COLUMNS)

    assert "**Large Dataset Retrieved** (21 total rows)" in text
    assert "Do not print this entire dataset" in text
    assert "**Full dataset contains 21 rows**" in text
    assert [line.split(" | ")[0] for line in data_lines(text)] == ["TK00", "TK01", "TK02", "TK19", "TK20"]
    for hidden in range(3, 19):
        assert f"TK{hidden:02d}" not in text


def test_large_result_shows_csv_path():
    text = render(make_rows(30), COLUMNS, csv_path="/tmp/stock-data-x.csv")
    assert "`/tmp/stock-data-x.csv`" in text
    assert "CSV Download" not in text


def test_csv_path_ignored_for_small_results():
    text = render(make_rows(2), COLUMNS, csv_path="/tmp/stock-data-x.csv")
    assert "/tmp/stock-data-x.csv" not in text


def test_column_order_and_missing_columns():
    rows = [{"pe_ratio": 12, "ticker": "AAPL"}]
    text = render(rows, ["ticker", "sector", "pe_ratio"])
    assert "AAPL | null | 12" in text


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "null"),
        (1234567, "1,234,567"),
        (-9876543, "-9,876,543"),
        (0, "0"),
        (1234.5678, "1,234.568"),
        (2.5, "2.5"),
        (3.0, "3"),
        (0.0001, "0"),
        (Decimal("1000.10"), "1,000.1"),
        (True, "true"),
        (False, "false"),
        ("Apple Inc.", "Apple Inc."),
        ("1234567", "1234567"),
    ],
)
def test_format_cell(value, expected):
    assert format_cell(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (1e30, "1,000,000,000,000,000,000,000,000,000,000"),
        (-2.5e26, "-250,000,000,000,000,000,000,000,000"),
        (123456789012345678901234567.5, "123,456,789,012,345,680,000,000,000"),
    ],
)
def test_format_cell_very_large_floats(value, expected):
    assert format_cell(value) == expected


def test_saved_file_comes_with_handling_menu():
    text = render(make_rows(21), COLUMNS, csv_path="/tmp/stock-data-x.csv")
    assert HANDLING_MENU in text
    assert "1. **Show on screen**" in text


def test_no_handling_menu_without_saved_file():
    text = render(make_rows(21), COLUMNS)
    assert HANDLING_MENU not in text
