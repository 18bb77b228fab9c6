"""
Prediction History Tests

Tests verify:
- FIFO eviction at capacity (60 appended -> latest 50 kept)
- Entries snapshot their telemetry
- Export precision, order and header
- Clear empties the store at once
"""

import random
from datetime import datetime, timezone

import pytest

from windsight.history import DEFAULT_HISTORY_CAPACITY, HistoryStore, export_filename, format_timestamp
from windsight.rules import FaultLabel, FaultScorer, Verdict
from windsight.telemetry import default_record


EXPORT_HEADER = "Timestamp,Prediction,Probability,Confidence,Wind Speed,Generator Power,Vibration,Temperature"


def make_verdict(probability: float = 0.1, label: str = "normal", second: int = 0) -> Verdict:
    return Verdict(
        label=label,
        probability=probability,
        confidence=0.9,
        timestamp=datetime(2024, 3, 15, 10, 30, second, 123456, tzinfo=timezone.utc),
    )


class TestCapacity:
    """FIFO ring buffer behaviour."""

    def test_default_capacity(self):
        assert DEFAULT_HISTORY_CAPACITY == 50
        assert HistoryStore().capacity == 50

    def test_sixty_appends_keep_latest_fifty(self):
        store = HistoryStore()
        appended = [store.record(make_verdict(probability=i / 100), default_record()) for i in range(60)]

        entries = store.entries()
        assert len(store) == 50
        assert [e.id for e in entries] == [e.id for e in appended[10:]]
        assert entries[0].probability == 0.10

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            HistoryStore(capacity=0)

    def test_ids_increase(self):
        store = HistoryStore()
        ids = [store.record(make_verdict(), default_record()).id for _ in range(5)]
        sequences = [int(i.split("-")[1]) for i in ids]
        assert sequences == sorted(sequences)
        assert len(set(ids)) == 5

    def test_latest(self):
        store = HistoryStore()
        assert store.latest() is None
        entry = store.record(make_verdict(), default_record())
        assert store.latest() == entry


class TestSnapshots:
    """Entries are independent of later telemetry edits."""

    def test_record_is_copied(self):
        record = default_record()
        entry = HistoryStore().record(make_verdict(), record)

        assert entry.record == record
        assert entry.record is not record

    def test_verdict_fields_copied(self):
        verdict = FaultScorer(rng=random.Random(1)).score(default_record().with_updates({"vibrationLevels": 80}))
        entry = HistoryStore().record(verdict, default_record())

        assert entry.label == verdict.label
        assert entry.attribution == verdict.attribution
        assert entry.affected_components == ["Gearbox", "Bearings"]


class TestSummaryAndClear:

    def test_summary_counts(self):
        store = HistoryStore()
        store.record(make_verdict(label="normal"), default_record())
        store.record(make_verdict(label="fault", probability=0.9), default_record())
        store.record(make_verdict(label="fault", probability=0.8), default_record())

        assert store.summary() == {"normal": 1, "warning": 0, "fault": 2, "total": 3}

    def test_clear(self):
        store = HistoryStore()
        for _ in range(3):
            store.record(make_verdict(), default_record())
        store.clear()

        assert len(store) == 0
        assert store.entries() == []


class TestExport:
    """CSV export."""

    def test_empty_store_exports_header_only(self):
        assert HistoryStore().export() == EXPORT_HEADER + "\n"

    def test_single_entry_row(self):
        store = HistoryStore()
        record = default_record().with_updates({
            "windSpeed": 12.34, "generatorPower": 1850.06, "vibrationLevels": 25.55, "componentTemperatures": 64.96,
        })
        store.record(make_verdict(probability=0.12345, label="normal"), record)

        lines = store.export().splitlines()
        assert lines[0] == EXPORT_HEADER
        assert lines[1] == "2024-03-15T10:30:00.123Z,normal,0.123,0.900,12.3,1850.1,25.6,65.0"

    def test_every_row_is_newline_terminated(self):
        store = HistoryStore()
        store.record(make_verdict(second=1), default_record())
        store.record(make_verdict(second=2), default_record())

        text = store.export()
        assert text.endswith("\n")
        assert not text.endswith("\n\n")
        assert text.count("\n") == 3
        assert "\r" not in text

    def test_newest_first(self):
        store = HistoryStore()
        store.record(make_verdict(second=1), default_record())
        store.record(make_verdict(second=2, label="warning", probability=0.4), default_record())

        lines = store.export().splitlines()
        assert lines[1].startswith("2024-03-15T10:30:02.123Z,warning")
        assert lines[2].startswith("2024-03-15T10:30:01.123Z,normal")

    def test_format_timestamp(self):
        value = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-01-02T03:04:05.678Z"

    def test_export_filename(self):
        assert export_filename(datetime(2024, 7, 9, tzinfo=timezone.utc)) == "turbine_predictions_2024-07-09.csv"
