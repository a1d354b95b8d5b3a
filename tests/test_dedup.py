from __future__ import annotations

from markwatch.dedup import DedupStore, row_key
from markwatch.schemas import MarkRecord


def test_seed_skips_blank_rows_and_pads_short_ones() -> None:
    store = DedupStore()
    added = store.seed([("d", "t", "p"), (None, None, None), ("d2", "t2"), ("d", "t", "p")])
    assert added == 2
    assert store.contains(("d", "t", "p"))
    assert store.contains(("d2", "t2", ""))
    assert len(store) == 2


def test_record_then_contains() -> None:
    store = DedupStore()
    rec = MarkRecord(date="2024-01-01", time="12:00:00", payload="Temp=20C")
    assert not store.contains(rec.key)
    store.record(rec.key)
    assert store.contains(rec.key)
    assert rec.key in store


def test_keys_equal_only_for_identical_triples() -> None:
    store = DedupStore()
    store.record(MarkRecord(date="a", time="b", payload="c").key)
    assert store.contains(MarkRecord(date="a", time="b", payload="c").key)
    # a joined-string key would collide on these
    assert not store.contains(MarkRecord(date="a b", time="", payload="c").key)
    assert not store.contains(MarkRecord(date="a", time="b", payload="c ").key)


def test_row_key_stringifies_cells() -> None:
    assert row_key((2024, None, "x")) == ("2024", "", "x")
    assert row_key(()) is None
