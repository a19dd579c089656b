# bet_tracker/services/ledger_stats.py
"""
Ledger aggregation: turns a snapshot of bets into profit, yield, win rate,
grouped breakdowns and the cumulative profit trend.

Everything here is a pure function of its inputs. Callers hand in the full
list of bets (ORM rows or any object with the same attributes) and get plain
dataclasses back; no query is issued and nothing is cached.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..models import BetStatus, SETTLED_STATUSES

ALL = "all"


def month_key(when: datetime) -> str:
    """'2026-01' style key; sorts chronologically as a plain string."""
    return f"{when.year}-{when.month:02d}"


def is_settled(bet) -> bool:
    return bet.status in SETTLED_STATUSES


def bet_profit(bet) -> float:
    """Net result of a settled bet; 0.0 for pending and void."""
    if bet.status == BetStatus.won:
        return float(bet.potential_return) - float(bet.stake)
    if bet.status == BetStatus.lost:
        return -float(bet.stake)
    return 0.0


def yield_pct(profit: float, staked: float) -> float:
    return (profit / staked) * 100 if staked > 0 else 0.0


@dataclass(frozen=True)
class LedgerFilter:
    month: str = ALL
    bookmaker: str = ALL
    category: str = ALL

    @classmethod
    def from_args(cls, args) -> "LedgerFilter":
        """Build from a request.args-like mapping; blanks mean 'all'."""
        def pick(name):
            value = (args.get(name) or "").strip()
            return value or ALL
        return cls(month=pick("month"), bookmaker=pick("bookmaker"), category=pick("category"))

    @property
    def is_active(self) -> bool:
        return (self.month, self.bookmaker, self.category) != (ALL, ALL, ALL)

    def matches(self, bet) -> bool:
        if self.month != ALL and month_key(bet.occurred_at) != self.month:
            return False
        if self.bookmaker != ALL and bet.bookmaker != self.bookmaker:
            return False
        if self.category != ALL and bet.category != self.category:
            return False
        return True


@dataclass
class GroupStats:
    name: str
    staked: float = 0.0
    profit: float = 0.0
    count: int = 0

    @property
    def yield_pct(self) -> float:
        return yield_pct(self.profit, self.staked)

    def add(self, stake: float, profit: float) -> None:
        self.staked += stake
        self.profit += profit
        self.count += 1


@dataclass
class LedgerStats:
    count: int = 0
    settled_count: int = 0
    wins: int = 0
    total_staked: float = 0.0
    total_profit: float = 0.0
    by_category: List[GroupStats] = field(default_factory=list)
    by_bookmaker: List[GroupStats] = field(default_factory=list)

    @property
    def yield_pct(self) -> float:
        return yield_pct(self.total_profit, self.total_staked)

    @property
    def win_rate(self) -> float:
        return (self.wins / self.settled_count) * 100 if self.settled_count > 0 else 0.0

    def to_dict(self) -> dict:
        def group(g: GroupStats) -> dict:
            return {
                "name": g.name,
                "staked": g.staked,
                "profit": g.profit,
                "count": g.count,
                "yield": g.yield_pct,
            }

        return {
            "count": self.count,
            "settled_count": self.settled_count,
            "wins": self.wins,
            "total_staked": self.total_staked,
            "total_profit": self.total_profit,
            "yield": self.yield_pct,
            "win_rate": self.win_rate,
            "by_category": [group(g) for g in self.by_category],
            "by_bookmaker": [group(g) for g in self.by_bookmaker],
        }


def _sorted_groups(groups: dict) -> List[GroupStats]:
    # sorted() is stable, so equal profits keep first-seen order
    return sorted(groups.values(), key=lambda g: g.profit, reverse=True)


def compute_stats(bets: Iterable, flt: Optional[LedgerFilter] = None) -> LedgerStats:
    """Single pass over `bets`; pending/void only count toward `count`."""
    flt = flt or LedgerFilter()
    stats = LedgerStats()
    by_category: dict[str, GroupStats] = {}
    by_bookmaker: dict[str, GroupStats] = {}

    for bet in bets:
        if not flt.matches(bet):
            continue
        stats.count += 1
        if not is_settled(bet):
            continue

        stake = float(bet.stake)
        profit = bet_profit(bet)
        stats.total_staked += stake
        stats.total_profit += profit
        stats.settled_count += 1
        if bet.status == BetStatus.won:
            stats.wins += 1

        by_category.setdefault(bet.category, GroupStats(bet.category)).add(stake, profit)
        by_bookmaker.setdefault(bet.bookmaker, GroupStats(bet.bookmaker)).add(stake, profit)

    stats.by_category = _sorted_groups(by_category)
    stats.by_bookmaker = _sorted_groups(by_bookmaker)
    return stats


@dataclass(frozen=True)
class TrendPoint:
    # None marks the synthetic starting point
    when: Optional[datetime]
    value: float
    stake: float = 0.0

    @property
    def is_start(self) -> bool:
        return self.when is None


def _chronological_key(bet):
    return (bet.occurred_at, bet.id if bet.id is not None else 0)


def cumulative_trend(bets: Iterable) -> List[TrendPoint]:
    """
    Running profit over all settled bets, oldest first.

    Always starts with a zero point so the chart has an origin; a ledger with
    no settled bets yields just that point.
    """
    settled = sorted((b for b in bets if is_settled(b)), key=_chronological_key)
    points = [TrendPoint(None, 0.0)]
    running = 0.0
    for bet in settled:
        running += bet_profit(bet)
        points.append(TrendPoint(bet.occurred_at, running, float(bet.stake)))
    return points


def filter_options(bets: Sequence) -> dict:
    """Distinct values for the stats dropdowns: months newest first, others A-Z."""
    months, bookmakers, categories = set(), set(), set()
    for bet in bets:
        months.add(month_key(bet.occurred_at))
        bookmakers.add(bet.bookmaker)
        categories.add(bet.category)
    return {
        "months": sorted(months, reverse=True),
        "bookmakers": sorted(bookmakers),
        "categories": sorted(categories),
    }
