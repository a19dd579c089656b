# bet_tracker/services/live.py
"""Keeps the all-time aggregates in step with the bet store."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from ..models import BetStatus
from .ledger_stats import LedgerStats, TrendPoint, compute_stats, cumulative_trend
from .store import BetStore, StoreEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BetRow:
    """Detached copy of a Bet; safe to keep after the session is gone."""
    id: int
    occurred_at: datetime
    stake: Decimal
    odds: Decimal
    potential_return: Decimal
    bookmaker: str
    category: str
    status: BetStatus
    notes: Optional[str] = None

    @classmethod
    def from_model(cls, bet) -> "BetRow":
        return cls(
            id=bet.id,
            occurred_at=bet.occurred_at,
            stake=bet.stake,
            odds=bet.odds,
            potential_return=bet.potential_return,
            bookmaker=bet.bookmaker,
            category=bet.category,
            status=BetStatus(bet.status),
            notes=bet.notes,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == BetStatus.pending


class LiveLedger:
    """
    Store subscriber. Every change event re-pulls all bets and recomputes the
    all-time stats and trend from scratch. The app also drops the snapshot at
    the start of each request, so writes made by other processes show up.
    """

    def __init__(self, store: BetStore):
        self.store = store
        self._bets: Optional[List[BetRow]] = None
        self._stats: Optional[LedgerStats] = None
        self._trend: Optional[List[TrendPoint]] = None
        self.refreshes = 0
        self._unsubscribe = store.subscribe(self.on_store_event)

    def on_store_event(self, event: StoreEvent) -> None:
        logger.debug(f"[live] {event.kind} {event.bet_ids} -> refresh")
        # a failed re-pull leaves no snapshot, so the next read retries
        self.invalidate()
        self.refresh()

    def refresh(self) -> None:
        self._bets = [BetRow.from_model(b) for b in self.store.all()]
        self._stats = compute_stats(self._bets)
        self._trend = cumulative_trend(self._bets)
        self.refreshes += 1

    def invalidate(self) -> None:
        """Drop the snapshot; the next read loads it again."""
        self._bets = self._stats = self._trend = None

    def _ensure(self) -> None:
        if self._bets is None:
            self.refresh()

    @property
    def bets(self) -> List[BetRow]:
        """All bets, oldest first."""
        self._ensure()
        return self._bets

    @property
    def stats(self) -> LedgerStats:
        self._ensure()
        return self._stats

    @property
    def trend(self) -> List[TrendPoint]:
        self._ensure()
        return self._trend

    def close(self) -> None:
        self._unsubscribe()
