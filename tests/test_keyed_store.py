from dataclasses import dataclass, replace

from keyed_store import ErrorKind, HoldingPolicy, KeyedCollectionStore, Ledger, Result


@dataclass(frozen=True)
class Rec:
    key: str
    value: int = 0


STORE = KeyedCollectionStore(lambda r: r.key, name="rec")


def test_add_appends_and_keeps_input():
    c = [Rec("a"), Rec("b")]
    out = STORE.add(c, Rec("c"))
    assert [r.key for r in out] == ["a", "b", "c"]
    assert len(c) == 2


def test_add_does_not_check_duplicates():
    out = STORE.add([Rec("a", 1)], Rec("a", 2))
    assert len(out) == 2
    assert STORE.find(out, "a") == Rec("a", 1)


def test_find_after_add_returns_record():
    r = Rec("z", 9)
    assert STORE.find(STORE.add([Rec("a")], r), "z") == r


def test_find_missing_is_none():
    assert STORE.find([Rec("a")], "nope") is None


def test_insert_rejects_duplicate_key():
    res = STORE.insert([Rec("a")], Rec("a", 5))
    assert not res.ok
    assert res.error.kind is ErrorKind.DUPLICATE_KEY
    assert res.value is None


def test_insert_accepts_new_key():
    res = STORE.insert([Rec("a")], Rec("b"))
    assert res.ok
    assert STORE.keys(res.value) == ["a", "b"]


def test_remove_drops_every_match_and_is_idempotent():
    c = [Rec("a"), Rec("b"), Rec("a", 2)]
    once = STORE.remove(c, "a")
    assert once == [Rec("b")]
    assert STORE.remove(once, "a") == once
    assert len(c) == 3


def test_remove_missing_key_is_noop():
    c = [Rec("a"), Rec("b")]
    assert STORE.remove(c, "x") == c


def test_replace_keeps_order_of_other_records():
    c = [Rec("a"), Rec("b"), Rec("c"), Rec("b", 7)]
    out = STORE.replace(c, "b", Rec("b", 1))
    assert out == [Rec("a"), Rec("b", 1), Rec("c"), Rec("b", 7)]
    assert c[1] == Rec("b")


def test_replace_missing_key_returns_same_records():
    c = [Rec("a"), Rec("b")]
    assert STORE.replace(c, "x", Rec("x")) == c


def test_result_helpers():
    ok = Result.success([1])
    assert ok.ok and ok.value == [1] and ok.message == ""
    bad = Result.failure(ErrorKind.NOT_FOUND, "missing")
    assert not bad.ok and bad.message == "missing" and str(bad.error) == "missing"


@dataclass(frozen=True)
class Bin:
    key: str
    held: tuple = ()


class Counted(HoldingPolicy):
    """Rec.value is a stock count; a bin keeps (key, quantity) pairs."""

    def holdings(self, holder):
        return holder.held

    def with_holdings(self, holder, holdings):
        return replace(holder, held=tuple(holdings))

    def entry_key(self, entry):
        return entry[0]

    def can_take(self, item, quantity):
        return item.value >= quantity

    def take(self, item, quantity):
        return replace(item, value=item.value - quantity), (item.key, quantity)

    def release(self, item, entry):
        return replace(item, value=item.value + entry[1])


BINS = KeyedCollectionStore(lambda b: b.key, name="bin")
LEDGER = Ledger(STORE, BINS, Counted())


def test_transfer_moves_quantity_to_holder():
    items, holders = [Rec("a", 5), Rec("b", 1)], [Bin("x"), Bin("y")]
    res = LEDGER.transfer(items, holders, "y", "a", 3)
    assert res.ok
    new_items, new_holders = res.value
    assert new_items == [Rec("a", 2), Rec("b", 1)]
    assert new_holders == [Bin("x"), Bin("y", (("a", 3),))]
    assert items == [Rec("a", 5), Rec("b", 1)]
    assert holders == [Bin("x"), Bin("y")]


def test_transfer_checks_holder_then_quantity_then_item():
    items, holders = [Rec("a", 5)], [Bin("x")]
    assert LEDGER.transfer(items, holders, "zz", "a", 0).error.kind is ErrorKind.HOLDER_NOT_FOUND
    assert LEDGER.transfer(items, holders, "x", "missing", 0).error.kind is ErrorKind.INVALID_QUANTITY
    assert LEDGER.transfer(items, holders, "x", "missing", 1).error.kind is ErrorKind.ITEM_UNAVAILABLE
    assert LEDGER.transfer(items, holders, "x", "a", 6).error.kind is ErrorKind.ITEM_UNAVAILABLE


def test_transfer_rejects_negative_quantity():
    items, holders = [Rec("a", 5)], [Bin("x")]
    res = LEDGER.transfer(items, holders, "x", "a", -3)
    assert res.error.kind is ErrorKind.INVALID_QUANTITY
    assert res.value is None
    assert items == [Rec("a", 5)]
    assert holders == [Bin("x")]


def test_revert_restores_source_and_empties_holder():
    items, holders = LEDGER.transfer([Rec("a", 5)], [Bin("x")], "x", "a", 2).value
    items, holders = LEDGER.revert(items, holders, "x", "a").value
    assert items == [Rec("a", 5)]
    assert holders == [Bin("x")]


def test_revert_of_entry_not_held_changes_nothing():
    items, holders = [Rec("a", 5)], [Bin("x")]
    res = LEDGER.revert(items, holders, "x", "a")
    assert res.error.kind is ErrorKind.ITEM_NOT_HELD
    assert LEDGER.revert(items, holders, "zz", "a").error.kind is ErrorKind.HOLDER_NOT_FOUND
    assert items == [Rec("a", 5)]
    assert holders == [Bin("x")]
