# bet_tracker/services/views.py
# Presentation rows for the templates and JSON endpoints. Rounding happens
# here and nowhere earlier.
from __future__ import annotations

import calendar
from datetime import date
from typing import List, Sequence

from .ledger_stats import (
    GroupStats, LedgerFilter, LedgerStats, TrendPoint, compute_stats, month_key,
)


def fmt_money(n: float, currency: str = "") -> str:
    text = f"{n:,.2f}"
    return f"{text} {currency}".strip()


def fmt_signed(n: float, currency: str = "") -> str:
    return ("+" if n > 0 else "") + fmt_money(n, currency)


def tone(n: float) -> str:
    """CSS class for a signed amount."""
    if n > 0:
        return "text-success"
    if n < 0:
        return "text-danger"
    return "text-secondary"


def month_label(key: str) -> str:
    """'2026-01' -> 'January 2026'."""
    year, month = key.split("-")
    return f"{calendar.month_name[int(month)]} {year}"


# ---------------------------
# Lists
# ---------------------------
def newest_first(bets: Sequence) -> list:
    # bets arrive oldest first; reversing keeps id order among equal timestamps
    return list(reversed(bets))


def recent_bets(bets: Sequence, limit: int = 5) -> list:
    return newest_first(bets)[:limit]


def search_history(bets: Sequence, term: str = "") -> list:
    """Newest first; case-insensitive match on bookmaker, category or notes."""
    rows = newest_first(bets)
    term = (term or "").strip().lower()
    if not term:
        return rows
    return [
        b for b in rows
        if term in b.bookmaker.lower()
        or term in b.category.lower()
        or (b.notes and term in b.notes.lower())
    ]


def paginate(rows: list, page: int, per_page: int) -> dict:
    total = len(rows)
    pages = max(1, -(-total // per_page))
    page = min(max(1, page), pages)
    start = (page - 1) * per_page
    return {
        "items": rows[start:start + per_page],
        "page": page,
        "pages": pages,
        "total": total,
        "has_prev": page > 1,
        "has_next": page < pages,
    }


# ---------------------------
# Dashboard
# ---------------------------
def dashboard_cards(bets: Sequence, today: date, currency: str = "") -> dict:
    """Count / profit / yield for the calendar month containing `today`."""
    key = month_key(today)
    stats = compute_stats(bets, LedgerFilter(month=key))
    return {
        "month_key": key,
        "month_label": month_label(key),
        "count": stats.count,
        "profit": stats.total_profit,
        "profit_fmt": fmt_signed(stats.total_profit, currency),
        "profit_tone": tone(stats.total_profit),
        "yield": stats.yield_pct,
        "yield_fmt": f"{stats.yield_pct:.2f}%",
        "yield_tone": tone(round(stats.yield_pct, 2)),
    }


# ---------------------------
# Charts & tables
# ---------------------------
def trend_series(points: List[TrendPoint]) -> dict:
    labels, values, stakes = [], [], []
    for p in points:
        labels.append("Start" if p.is_start else p.when.strftime("%d.%m"))
        values.append(round(p.value, 2))
        stakes.append(round(p.stake, 2))
    final = values[-1] if values else 0.0
    return {
        "labels": labels,
        "values": values,
        "stakes": stakes,
        "has_data": len(points) > 1,
        "is_positive": final >= 0,
    }


def group_rows(groups: List[GroupStats], currency: str = "") -> List[dict]:
    return [
        {
            "name": g.name,
            "count": g.count,
            "staked": round(g.staked, 2),
            "staked_fmt": fmt_money(g.staked, currency),
            "profit": round(g.profit, 2),
            "profit_fmt": fmt_signed(g.profit, currency),
            "profit_tone": tone(g.profit),
            "yield": round(g.yield_pct, 2),
            "yield_fmt": f"{g.yield_pct:.2f}%",
        }
        for g in groups
    ]


def stats_summary(stats: LedgerStats, currency: str = "") -> dict:
    return {
        "count": stats.count,
        "settled_count": stats.settled_count,
        "total_staked_fmt": fmt_money(stats.total_staked, currency),
        "total_profit_fmt": fmt_signed(stats.total_profit, currency),
        "profit_tone": tone(stats.total_profit),
        "yield_fmt": f"{stats.yield_pct:.2f}%",
        "yield_tone": tone(round(stats.yield_pct, 2)),
        "win_rate_fmt": f"{stats.win_rate:.1f}%",
        "by_category": group_rows(stats.by_category, currency),
        "by_bookmaker": group_rows(stats.by_bookmaker, currency),
    }
