"""Tests for promptcanvas.core.history - the bounded history ledger."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from promptcanvas.core.history import DEFAULT_CAPACITY, HistoryLedger
from promptcanvas.core.models import HistoryEntry


def _entry(index: int) -> HistoryEntry:
    return HistoryEntry(
        id=str(index),
        prompt=f"prompt {index}",
        image_url=f"/uploads/img_{index}.png",
        created_at=datetime.now(timezone.utc),
    )


class TestHistoryLedger:
    """Test HistoryLedger append/list semantics."""

    def test_starts_empty(self):
        ledger = HistoryLedger()
        assert ledger.list() == []
        assert len(ledger) == 0

    def test_default_capacity_is_fifty(self):
        assert HistoryLedger().capacity == DEFAULT_CAPACITY == 50

    def test_list_is_newest_first(self):
        ledger = HistoryLedger()
        for index in range(3):
            ledger.append(_entry(index))

        assert [entry.id for entry in ledger.list()] == ["2", "1", "0"]

    def test_fifty_one_appends_evict_the_oldest(self):
        ledger = HistoryLedger()
        for index in range(51):
            ledger.append(_entry(index))

        entries = ledger.list()
        assert len(entries) == 50
        assert entries[0].id == "50"
        assert entries[-1].id == "1"
        assert "0" not in {entry.id for entry in entries}

    def test_list_does_not_mutate(self):
        ledger = HistoryLedger()
        ledger.append(_entry(0))

        snapshot = ledger.list()
        snapshot.clear()

        assert len(ledger.list()) == 1

    def test_custom_capacity(self):
        ledger = HistoryLedger(capacity=2)
        for index in range(5):
            ledger.append(_entry(index))
        assert [entry.id for entry in ledger.list()] == ["4", "3"]

    def test_invalid_capacity_rejected(self):
        with pytest.raises(ValueError):
            HistoryLedger(capacity=0)

    def test_record_builds_and_appends_entry(self):
        ledger = HistoryLedger()

        entry = ledger.record(
            prompt="a red circle",
            image_url="/uploads/img_1_0.png",
            settings={"size": "1024x1024"},
            duration=2.5,
        )

        assert ledger.list() == [entry]
        assert entry.prompt == "a red circle"
        assert entry.image_url == "/uploads/img_1_0.png"
        assert entry.settings == {"size": "1024x1024"}
        assert entry.duration == 2.5
        assert entry.created_at.tzinfo is not None

    def test_record_ids_are_unique(self):
        ledger = HistoryLedger()
        ids = {ledger.record("p", "u").id for _ in range(20)}
        assert len(ids) == 20

    def test_concurrent_appends_are_not_lost(self):
        ledger = HistoryLedger(capacity=1000)

        def worker(offset: int):
            for index in range(100):
                ledger.append(_entry(offset + index))

        threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(ledger) == 800
