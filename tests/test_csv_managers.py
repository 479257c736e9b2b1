"""Test CSV Manager functionality."""

from pathlib import Path

import pytest

from sharematch import CSVManager


@pytest.fixture(name="match_csv")
def fixture_match_csv(tmp_path):
    """Create a small matches export with a missing cell."""
    csv_content = """rule,sell_ids,profit_or_loss
SAME DAY,s1,6.55
SECTION 104,s2,
BED AND BREAKFAST,s3,-0.10"""

    path = tmp_path / "matches.csv"
    path.write_text(csv_content, encoding="utf-8")
    return path


def test_read_csv(match_csv):
    """Test reading CSV file."""
    data = CSVManager.read_csv(match_csv)
    assert len(data) == 3
    assert data[0]["rule"] == "SAME DAY"
    assert data[2]["profit_or_loss"] == -0.10


def test_read_csv_empty_cells_are_none(match_csv):
    """Empty cells come back as None rather than NaN."""
    data = CSVManager.read_csv(match_csv)
    assert data[1]["profit_or_loss"] is None


def test_read_csv_by_position(match_csv):
    """Header-less reads key each row by column position."""
    data = CSVManager.read_csv(match_csv, header=None, dtype=object)
    assert len(data) == 4
    assert data[0] == {0: "rule", 1: "sell_ids", 2: "profit_or_loss"}


def test_read_csv_missing_file(tmp_path):
    """A missing file gives no rows."""
    assert CSVManager.read_csv(tmp_path / "missing.csv") == []


def test_read_excel_missing_file(tmp_path):
    """A missing workbook gives no rows."""
    assert CSVManager.read_excel(tmp_path / "missing.xlsx") == []


def test_write_csv_static_method(tmp_path):
    """Test the static write method."""
    output = tmp_path / "export" / "matches.csv"
    test_data = [
        {"rule": "SAME DAY", "sell_ids": "s1", "profit_or_loss": "6.55"},
        {"rule": "SECTION 104", "sell_ids": "s2;s3", "profit_or_loss": "-0.10"},
    ]

    CSVManager.write_csv(test_data, output)

    assert output.exists()
    with output.open(encoding="utf-8") as f:
        lines = f.readlines()

    assert "rule,sell_ids,profit_or_loss" in lines[0]
    assert "SAME DAY,s1,6.55" in lines[1]
    assert "SECTION 104,s2;s3,-0.10" in lines[2]


def test_write_csv_empty_list(tmp_path):
    """Test write method with empty list."""
    output = tmp_path / "matches.csv"
    CSVManager.write_csv([], output)
    assert not Path(output).exists()
