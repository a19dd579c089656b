# bet_tracker/services/store.py
"""
Bet store: the only code that writes bets to the database.

Every mutation commits (or rolls back) on its own and, once the commit has
succeeded, notifies subscribers with a StoreEvent. Subscribers re-read the
snapshot themselves; events carry ids, never rows.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Bet

logger = logging.getLogger(__name__)

# Columns a caller may set; id is assigned by the database.
WRITABLE_FIELDS = (
    "occurred_at", "stake", "odds", "potential_return",
    "bookmaker", "category", "status", "notes",
)


class StoreError(RuntimeError):
    """A database write failed and was rolled back."""


@dataclass(frozen=True)
class StoreEvent:
    kind: str  # insert | update | delete | replace
    bet_ids: tuple = ()


Listener = Callable[[StoreEvent], None]


class BetStore:
    def __init__(self, session=None):
        self._session = session
        self._listeners: List[Listener] = []

    @property
    def session(self):
        return self._session or db.session

    # ---------------------------
    # Subscriptions
    # ---------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # a broken subscriber must not undo a committed write
                logger.exception(f"[store] listener failed for {event.kind} event")

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[store] {action} failed: {e}")
            raise StoreError(f"Could not {action}.") from e

    # ---------------------------
    # Reads
    # ---------------------------
    def get(self, bet_id: int) -> Optional[Bet]:
        return self.session.get(Bet, bet_id)

    def all(self, newest_first: bool = False) -> List[Bet]:
        if newest_first:
            order = (Bet.occurred_at.desc(), Bet.id.desc())
        else:
            order = (Bet.occurred_at.asc(), Bet.id.asc())
        return self.session.query(Bet).order_by(*order).all()

    def count(self) -> int:
        return self.session.query(Bet).count()

    # ---------------------------
    # Writes
    # ---------------------------
    def add(self, fields: dict) -> Bet:
        bet = Bet(**{k: v for k, v in fields.items() if k in WRITABLE_FIELDS})
        self.session.add(bet)
        self._commit("save the bet")
        logger.info(f"[store] inserted bet id={bet.id} status={bet.status.value}")
        self._emit(StoreEvent("insert", (bet.id,)))
        return bet

    def update(self, bet_id: int, changes: dict) -> Optional[Bet]:
        """Partial update; returns None when the bet does not exist."""
        bet = self.get(bet_id)
        if bet is None:
            return None
        for key, value in changes.items():
            if key not in WRITABLE_FIELDS:
                raise KeyError(f"Field '{key}' is not writable.")
            setattr(bet, key, value)
        self._commit("update the bet")
        logger.info(f"[store] updated bet id={bet_id} fields={sorted(changes)}")
        self._emit(StoreEvent("update", (bet_id,)))
        return bet

    def delete(self, bet_id: int) -> bool:
        bet = self.get(bet_id)
        if bet is None:
            return False
        self.session.delete(bet)
        self._commit("delete the bet")
        logger.info(f"[store] deleted bet id={bet_id}")
        self._emit(StoreEvent("delete", (bet_id,)))
        return True

    def replace_all(self, rows: Iterable[dict]) -> int:
        """
        Clear the collection and insert `rows` in one transaction.

        Rows may carry an `id`, which is kept as-is. On any failure the old
        collection is left exactly as it was.
        """
        rows = list(rows)
        try:
            # evaluate: drop the old rows from the identity map so restored ids can reuse them
            self.session.query(Bet).delete(synchronize_session="evaluate")
            self.session.add_all(
                Bet(**{k: v for k, v in row.items() if k == "id" or k in WRITABLE_FIELDS})
                for row in rows
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[store] bulk replace failed: {e}")
            raise StoreError("Could not restore the backup.") from e
        self.session.expire_all()
        logger.info(f"[store] replaced collection with {len(rows)} bet(s)")
        self._emit(StoreEvent("replace", tuple(r["id"] for r in rows if r.get("id") is not None)))
        return len(rows)
