from __future__ import annotations

from temperaturemap.selection import SelectionChange, SelectionLedger


def test_toggle_adds_then_removes():
    ledger = SelectionLedger()
    assert ledger.toggle("FRA", "France") is SelectionChange.ADDED
    assert ledger.has("FRA")
    assert ledger.toggle("FRA", "France") is SelectionChange.REMOVED
    assert not ledger.has("FRA")
    assert len(ledger) == 0


def test_remove_is_idempotent():
    ledger = SelectionLedger()
    ledger.toggle("BRA", "Brazil")
    assert ledger.remove("BRA") is True
    assert ledger.remove("BRA") is False
    assert ledger.remove("never-added") is False


def test_entries_keep_insertion_order():
    ledger = SelectionLedger()
    for rid, name in [("JPN", "Japan"), ("CAN", "Canada"), ("KEN", "Kenya")]:
        ledger.toggle(rid, name)
    ledger.toggle("CAN", "Canada")
    ledger.toggle("CAN", "Canada")
    assert ledger.entries() == [("JPN", "Japan"), ("KEN", "Kenya"), ("CAN", "Canada")]


def test_listeners_see_every_mutation():
    ledger = SelectionLedger()
    events: list[tuple] = []
    ledger.add_listener(lambda *args: events.append(args))
    ledger.toggle("IND", "India")
    ledger.remove("IND")
    ledger.remove("IND")
    assert events == [
        (SelectionChange.ADDED, "IND", "India"),
        (SelectionChange.REMOVED, "IND", "India"),
    ]
