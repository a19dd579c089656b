from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from bet_tracker import create_app
from bet_tracker.config import Testing
from bet_tracker.extensions import db
from bet_tracker.models import BetStatus
from bet_tracker.services.store import StoreError, StoreEvent
from tests.conftest import bet_fields


def _fail_commit(monkeypatch):
    def boom():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    # patch the live Session behind the scoped proxy
    monkeypatch.setattr(db.session(), "commit", boom)


def test_add_assigns_id_and_emits_insert(store):
    events = []
    store.subscribe(events.append)

    bet = store.add(bet_fields())

    assert bet.id is not None
    assert events == [StoreEvent("insert", (bet.id,))]
    assert store.count() == 1


def test_all_orders_by_time_then_id(store):
    late = store.add(bet_fields(occurred_at=bet_fields()["occurred_at"].replace(hour=22)))
    a = store.add(bet_fields())
    b = store.add(bet_fields())

    assert [x.id for x in store.all()] == [a.id, b.id, late.id]
    assert [x.id for x in store.all(newest_first=True)] == [late.id, b.id, a.id]


def test_update_is_partial(store):
    bet = store.add(bet_fields(notes="acca"))
    events = []
    store.subscribe(events.append)

    store.update(bet.id, {"status": BetStatus.won})

    again = store.get(bet.id)
    assert again.status == BetStatus.won
    assert again.notes == "acca"
    assert again.stake == Decimal("50.00")
    assert events == [StoreEvent("update", (bet.id,))]


def test_update_rejects_unknown_fields(store):
    bet = store.add(bet_fields())
    with pytest.raises(KeyError):
        store.update(bet.id, {"id": 99})


def test_missing_ids_are_noops(store):
    events = []
    store.subscribe(events.append)

    assert store.update(404, {"status": BetStatus.won}) is None
    assert store.delete(404) is False
    assert events == []


def test_delete_emits_event(store):
    bet = store.add(bet_fields())
    events = []
    store.subscribe(events.append)

    assert store.delete(bet.id) is True
    assert store.get(bet.id) is None
    assert events == [StoreEvent("delete", (bet.id,))]


def test_unsubscribe_stops_notifications(store):
    events = []
    unsubscribe = store.subscribe(events.append)
    unsubscribe()
    unsubscribe()

    store.add(bet_fields())
    assert events == []


def test_failing_listener_does_not_undo_the_write(store):
    def broken(event):
        raise RuntimeError("listener bug")

    seen = []
    store.subscribe(broken)
    store.subscribe(seen.append)

    bet = store.add(bet_fields())

    assert store.get(bet.id) is not None
    assert len(seen) == 1


def test_commit_failure_rolls_back_and_raises(store, monkeypatch):
    events = []
    store.subscribe(events.append)
    _fail_commit(monkeypatch)

    with pytest.raises(StoreError):
        store.add(bet_fields())

    monkeypatch.undo()
    assert store.count() == 0
    assert events == []


def test_replace_all_keeps_ids(store):
    store.add(bet_fields())
    events = []
    store.subscribe(events.append)

    n = store.replace_all([bet_fields(id=7), bet_fields(id=3, status=BetStatus.lost)])

    assert n == 2
    assert sorted(b.id for b in store.all()) == [3, 7]
    assert store.get(3).status == BetStatus.lost
    assert events == [StoreEvent("replace", (7, 3))]


def test_replace_all_failure_keeps_old_collection(store, monkeypatch):
    original = store.add(bet_fields(notes="keep me"))
    _fail_commit(monkeypatch)

    with pytest.raises(StoreError):
        store.replace_all([bet_fields(id=50)])

    monkeypatch.undo()
    assert [b.id for b in store.all()] == [original.id]
    assert store.get(original.id).notes == "keep me"


def test_live_ledger_follows_every_write(app, store):
    ledger = app.extensions["live_ledger"]
    assert ledger.stats.count == 0

    bet = store.add(bet_fields(stake=Decimal("40"), potential_return=Decimal("100")))
    assert ledger.stats.count == 1
    assert ledger.stats.total_staked == 0

    store.update(bet.id, {"status": BetStatus.won})
    assert ledger.stats.total_profit == 60
    assert [p.value for p in ledger.trend] == [0, 60]

    store.delete(bet.id)
    assert ledger.bets == []
    assert ledger.stats.total_profit == 0


def test_live_ledger_refreshes_once_per_event(app, store):
    ledger = app.extensions["live_ledger"]
    ledger.refresh()
    before = ledger.refreshes

    store.add(bet_fields())
    store.add(bet_fields())

    assert ledger.refreshes == before + 2


def test_live_ledger_close_unsubscribes(app, store):
    ledger = app.extensions["live_ledger"]
    ledger.refresh()
    ledger.close()
    before = ledger.refreshes

    store.add(bet_fields())
    assert ledger.refreshes == before


def test_live_ledger_retries_after_a_failed_refresh(app, store, monkeypatch):
    ledger = app.extensions["live_ledger"]
    assert ledger.stats.count == 0

    def unreadable(newest_first=False):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(store, "all", unreadable)
    store.add(bet_fields())
    monkeypatch.undo()

    assert ledger.stats.count == 1


def test_requests_see_writes_from_another_app(app, client):
    class _SameFile(Testing):
        SQLALCHEMY_DATABASE_URI = app.config["SQLALCHEMY_DATABASE_URI"]

    assert client.get("/api/stats").get_json()["count"] == 0

    # e.g. `flask restore-backup` running in its own process
    other = create_app(_SameFile)
    with other.app_context():
        other.extensions["bet_store"].add(bet_fields(notes="from the cli"))
        db.session.remove()

    assert client.get("/api/stats").get_json()["count"] == 1
    assert b"from the cli" in client.get("/history").data
