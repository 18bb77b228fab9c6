"""
CSV Import/Export Tests

Tests verify:
- Header + at least one data row is required
- Numeric cells become numbers, text stays text
- Rows with a field count mismatch are skipped
- Rows that fail validation are skipped
- Export uses the canonical header order
"""

import pytest

from windsight.telemetry import (
    PARAMETER_NAMES,
    CsvFormatError,
    default_record,
    load_records_from_csv,
    parse_telemetry_csv,
    records_to_csv,
    scenario_records,
)


def record_row(record) -> str:
    return ",".join(str(value) for value in record.to_wire().values())


HEADER = ",".join(PARAMETER_NAMES)


class TestParse:
    """Raw row parsing."""

    def test_requires_data_row(self):
        with pytest.raises(CsvFormatError):
            parse_telemetry_csv(HEADER + "\n")

    def test_blank_document(self):
        with pytest.raises(CsvFormatError):
            parse_telemetry_csv("\n\n")

    def test_numbers_and_text(self):
        rows = parse_telemetry_csv("a,b,c\n1.5, 2 ,tubular\n")
        assert rows == [{"a": 1.5, "b": 2.0, "c": "tubular"}]

    def test_mismatched_rows_skipped(self):
        rows = parse_telemetry_csv("a,b\n1,2\n3\n4,5,6\n7,8\n")
        assert rows == [{"a": 1.0, "b": 2.0}, {"a": 7.0, "b": 8.0}]

    def test_blank_lines_ignored(self):
        rows = parse_telemetry_csv("a,b\n\n1,2\n\n")
        assert len(rows) == 1


class TestLoadRecords:
    """Validated record loading."""

    def test_loads_default_record(self):
        text = HEADER + "\n" + record_row(default_record()) + "\n"
        assert load_records_from_csv(text) == [default_record()]

    def test_invalid_rows_skipped(self):
        bad = default_record().to_wire()
        bad["windSpeed"] = "calm"
        text = "\n".join([
            HEADER,
            record_row(default_record()),
            ",".join(str(value) for value in bad.values()),
        ])
        assert load_records_from_csv(text) == [default_record()]

    def test_export_then_load(self):
        records = scenario_records(seed=3)
        assert load_records_from_csv(records_to_csv(records)) == records


class TestExport:
    """CSV export."""

    def test_header_order(self):
        text = records_to_csv([default_record()])
        assert text.splitlines()[0] == HEADER

    def test_one_line_per_record(self):
        text = records_to_csv(scenario_records(seed=3))
        assert len(text.splitlines()) == 6
        assert text.endswith("\n")
