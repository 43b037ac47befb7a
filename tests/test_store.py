"""Tests for the key-value stores and the daily trade bucket adapter."""

import sqlite3
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from daybook.db.store import MemoryKeyValueStore, SqliteKeyValueStore, TradeStore
from daybook.errors import MalformedBucketError
from daybook.models import Emotions, Screenshot, TradeEntry, VoiceNote

DAY = date(2024, 2, 29)

# One valid trade followed by one whose rr is a number instead of text.
PARTLY_INVALID_BUCKET = (
    '[{"symbol":"ES","side":"long","entryPrice":100,"exitPrice":110,"quantity":10,"pnl":100},'
    '{"symbol":"NQ","side":"short","pnl":-40,"rr":2}]'
)


@pytest.fixture
def temp_kv():
    """Create a temporary SQLite key-value store for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield SqliteKeyValueStore(Path(tmpdir) / "nested" / "test.db")


@pytest.fixture
def store(temp_kv: SqliteKeyValueStore) -> TradeStore:
    return TradeStore(temp_kv)


def trade_strategy():
    """Generate valid TradeEntry objects for testing."""
    finite = st.floats(min_value=-100000.0, max_value=100000.0, allow_nan=False, allow_infinity=False)
    return st.builds(
        TradeEntry,
        symbol=st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ", min_size=1, max_size=10),
        side=st.sampled_from(["long", "short"]),
        entry_price=st.one_of(st.none(), finite),
        exit_price=st.one_of(st.none(), finite),
        quantity=st.one_of(st.none(), finite),
        pnl=finite,
        notes=st.one_of(
            st.none(),
            st.text(alphabet=st.characters(whitelist_categories=("L", "N", "Zs")), min_size=1, max_size=50).filter(lambda x: x.strip() != "")),
        emotions=st.builds(
            Emotions,
            pre=st.sampled_from([None, "Confident", "FOMO"]),
            during=st.sampled_from([None, "Calm", "Greedy"]),
            post=st.sampled_from([None, "Learning"]),
        ),
        screenshot_refs=st.lists(st.sampled_from(["a.png", "b.png"]), max_size=2),
        created_at=st.datetimes(min_value=datetime(2020, 1, 1), max_value=datetime(2030, 12, 31)),
    )


class TestSqliteKeyValueStore:
    """SQLite key-value backend."""

    def test_schema_created(self, temp_kv: SqliteKeyValueStore):
        conn = sqlite3.connect(temp_kv.db_path)
        try:
            rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        finally:
            conn.close()
        assert "entries" in [row[0] for row in rows]

    def test_get_missing_key(self, temp_kv: SqliteKeyValueStore):
        assert temp_kv.get("nope") is None

    def test_set_replaces_value(self, temp_kv: SqliteKeyValueStore):
        temp_kv.set("k", "one")
        temp_kv.set("k", "two")
        assert temp_kv.get("k") == "two"

    def test_list_keys_by_prefix(self, temp_kv: SqliteKeyValueStore):
        for key in ["a:2", "a:1", "b:1", "a%x"]:
            temp_kv.set(key, "[]")
        assert temp_kv.list_keys("a:") == ["a:1", "a:2"]
        assert temp_kv.list_keys() == ["a%x", "a:1", "a:2", "b:1"]


class TestTradeStoreRoundTrip:
    """
    *For any* record saved for a date, loading that date returns a
    sequence containing the record with identical fields.
    """

    @given(trades=st.lists(trade_strategy(), max_size=5))
    @settings(max_examples=50)
    def test_save_load_round_trip(self, trades: list[TradeEntry]):
        store = TradeStore(MemoryKeyValueStore())
        store.save_day(DAY, trades)
        assert store.load_day(DAY) == trades

    def test_round_trip_with_attachments(self, store: TradeStore):
        records = [
            TradeEntry(symbol="es", side="short", entry_price=5000, exit_price=4990, quantity=2, pnl=20),
            VoiceNote(ref="memo.webm", date=DAY),
            Screenshot(ref="/tmp/chart.png", name="chart.png", date=DAY),
        ]
        store.save_day(DAY, records)

        loaded = store.load_day(DAY)

        assert loaded == records
        assert isinstance(loaded[1], VoiceNote)
        assert isinstance(loaded[2], Screenshot)
        assert loaded[0].symbol == "ES"

    def test_append_preserves_order(self, store: TradeStore):
        first = TradeEntry(symbol="NQ", side="long", pnl=1)
        second = TradeEntry(symbol="CL", side="long", pnl=2)
        store.append(DAY, first)
        store.append(DAY, second)
        assert [r.symbol for r in store.load_day(DAY)] == ["NQ", "CL"]

    def test_save_is_idempotent_and_last_writer_wins(self, store: TradeStore):
        a = [TradeEntry(symbol="A", side="long", pnl=1)]
        b = [TradeEntry(symbol="B", side="long", pnl=2)]
        store.save_day(DAY, a)
        store.save_day(DAY, a)
        assert store.load_day(DAY) == a
        store.save_day(DAY, b)
        assert store.load_day(DAY) == b

    def test_dates_are_independent(self, store: TradeStore):
        store.append(DAY, TradeEntry(symbol="A", side="long", pnl=1))
        assert store.load_day(date(2024, 3, 1)) == []


class TestTradeStoreFailSoft:
    """Missing or malformed buckets load as empty."""

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "{\"symbol\": \"ES\"}",
            "[{\"side\": \"long\"}]",
            "[{\"type\": \"hologram\", \"ref\": \"x\"}]",
            "",
        ],
    )
    def test_malformed_bucket(self, raw: str):
        kv = MemoryKeyValueStore()
        store = TradeStore(kv)
        kv.set(store.day_key(DAY), raw)
        assert store.load_day(DAY) == []

    def test_missing_bucket(self, store: TradeStore):
        assert store.load_day(DAY) == []

    def test_loads_browser_written_bucket(self):
        """Buckets written by the browser journal use string prices and 'url' refs."""
        raw = (
            '[{"symbol":"ES","side":"long","entryPrice":"100","exitPrice":"110",'
            '"quantity":"10","rr":"","pnl":100,"notes":"",'
            '"emotions":{"pre":"Calm","during":"","post":""},"timezone":"UTC",'
            '"id":"abc","createdAt":"2024-02-29T10:00:00.000Z"},'
            '{"id":"v1","type":"voice","url":"blob:memo","date":"2024-02-29"}]'
        )
        store = TradeStore(MemoryKeyValueStore({"dbt:trades:2024-02-29": raw}))

        records = store.load_day(DAY)

        assert len(records) == 2
        trade, note = records
        assert isinstance(trade, TradeEntry)
        assert trade.entry_price == 100.0
        assert trade.rr is None
        assert trade.emotions.pre == "Calm"
        assert trade.emotions.during is None
        assert isinstance(note, VoiceNote)
        assert note.ref == "blob:memo"


class TestTradeStoreWritesKeepMalformedData:
    """Writes refuse to replace a bucket they could not read."""

    @pytest.fixture
    def seeded(self, temp_kv: SqliteKeyValueStore, store: TradeStore) -> TradeStore:
        temp_kv.set(store.day_key(DAY), PARTLY_INVALID_BUCKET)
        return store

    def test_append_leaves_original_records(self, temp_kv: SqliteKeyValueStore, seeded: TradeStore):
        with pytest.raises(MalformedBucketError):
            seeded.append(DAY, TradeEntry(symbol="CL", side="long", pnl=5))

        raw = temp_kv.get(seeded.day_key(DAY))
        assert raw == PARTLY_INVALID_BUCKET
        assert '"ES"' in raw

    def test_remove_leaves_original_records(self, temp_kv: SqliteKeyValueStore, seeded: TradeStore):
        with pytest.raises(MalformedBucketError):
            seeded.remove(DAY, "anything")
        assert temp_kv.get(seeded.day_key(DAY)) == PARTLY_INVALID_BUCKET

    def test_reads_still_fail_soft(self, seeded: TradeStore):
        assert seeded.load_day(DAY) == []

    def test_missing_bucket_is_writable(self, store: TradeStore):
        assert store.load_day_for_update(DAY) == []
        store.append(DAY, TradeEntry(symbol="CL", side="long", pnl=5))
        assert [r.symbol for r in store.load_day(DAY)] == ["CL"]


class TestTradeStoreKeys:
    """Key layout, removal and day listing."""

    def test_day_key_format(self):
        store = TradeStore(MemoryKeyValueStore(), namespace="journal")
        assert store.day_key(date(2024, 1, 5)) == "journal:2024-01-05"

    def test_persisted_layout_uses_camel_case(self):
        kv = MemoryKeyValueStore()
        store = TradeStore(kv)
        store.save_day(DAY, [TradeEntry(symbol="ES", side="long", entry_price=1, pnl=0)])
        raw = kv.get("dbt:trades:2024-02-29")
        assert '"entryPrice":1.0' in raw
        assert '"createdAt"' in raw

    def test_remove(self, store: TradeStore):
        keep = TradeEntry(symbol="A", side="long", pnl=1)
        drop = TradeEntry(symbol="B", side="long", pnl=2)
        store.save_day(DAY, [keep, drop])

        assert store.remove(DAY, drop.id) is True
        assert store.load_day(DAY) == [keep]
        assert store.remove(DAY, drop.id) is False

    def test_list_days(self, store: TradeStore):
        for d in [date(2024, 2, 29), date(2024, 2, 1), date(2024, 3, 1), date(2023, 2, 1)]:
            store.save_day(d, [])
        assert store.list_days(2024, 2) == [date(2024, 2, 1), date(2024, 2, 29)]
        assert store.list_days(2024) == [date(2024, 2, 1), date(2024, 2, 29), date(2024, 3, 1)]
        assert len(store.list_days()) == 4
