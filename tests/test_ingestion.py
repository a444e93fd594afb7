from __future__ import annotations

from typing import Optional

import pytest

from productlink.errors import PayloadNotFoundError, PayloadValidationError
from productlink.services.ingestion import PayloadIngestor
from productlink.services.storage import InMemoryStore


class LaggingStore(InMemoryStore):
    """Answers ``None`` for the first ``misses`` reads of every key."""

    def __init__(self, misses: int) -> None:
        super().__init__()
        self.misses = misses
        self.reads: list[str] = []

    def get(self, key: str) -> Optional[str]:
        self.reads.append(key)
        if len(self.reads) <= self.misses:
            return None
        return super().get(key)


def test_fetch_retries_until_write_is_visible() -> None:
    store = LaggingStore(misses=1)
    stored = PayloadIngestor(store).ingest([{"product": "Test", "price": 5}])

    records = PayloadIngestor(store, read_retries=1, retry_delay=0).fetch(stored.id)

    assert [record.product for record in records] == ["Test"]
    assert records[0].price == "5.00"
    assert store.reads == [stored.id, stored.id]


def test_fetch_without_retries_reads_once() -> None:
    store = LaggingStore(misses=1)
    stored = PayloadIngestor(store).ingest([{"product": "Test"}])

    with pytest.raises(PayloadNotFoundError):
        PayloadIngestor(store, retry_delay=0).fetch(stored.id)

    assert store.reads == [stored.id]


def test_fetch_gives_up_after_configured_retries() -> None:
    store = LaggingStore(misses=5)
    stored = PayloadIngestor(store).ingest([])

    with pytest.raises(PayloadNotFoundError):
        PayloadIngestor(store, read_retries=2, retry_delay=0).fetch_text(stored.id)

    assert len(store.reads) == 3


def test_ingest_rejects_non_list_without_writing() -> None:
    store = InMemoryStore()

    with pytest.raises(PayloadValidationError):
        PayloadIngestor(store).ingest({"product": "Test"})

    assert len(store) == 0


def test_malformed_id_is_not_found_before_any_read() -> None:
    store = LaggingStore(misses=0)

    with pytest.raises(PayloadNotFoundError):
        PayloadIngestor(store, read_retries=3, retry_delay=0).fetch("not-a-content-id")

    assert store.reads == []
