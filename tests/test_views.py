from datetime import date, datetime

from bet_tracker.services.ledger_stats import compute_stats, cumulative_trend
from bet_tracker.services.views import (
    dashboard_cards, fmt_money, fmt_signed, month_label, paginate, recent_bets, search_history,
    stats_summary, tone, trend_series,
)
from tests.conftest import row


def _ledger():
    # oldest first, as the live ledger hands them out
    return [
        row(1, 100, "won", 200, when=datetime(2025, 12, 30, 20, 0), notes="Boxing Day special"),
        row(2, 50, "lost", when=datetime(2026, 1, 3, 18, 0), category="Tennis", bookmaker="STS"),
        row(3, 20, "won", 50, when=datetime(2026, 1, 5, 21, 0)),
        row(4, 10, "pending", 25, when=datetime(2026, 1, 5, 21, 0), category="Esports"),
    ]


def test_formatting_helpers():
    assert fmt_money(1234.5, "PLN") == "1,234.50 PLN"
    assert fmt_money(3) == "3.00"
    assert fmt_signed(12.5) == "+12.50"
    assert fmt_signed(-8, "PLN") == "-8.00 PLN"
    assert fmt_signed(0) == "0.00"
    assert (tone(1), tone(-0.5), tone(0)) == ("text-success", "text-danger", "text-secondary")
    assert month_label("2026-01") == "January 2026"


def test_dashboard_counts_only_the_current_month():
    cards = dashboard_cards(_ledger(), date(2026, 1, 20), "PLN")

    assert cards["month_key"] == "2026-01"
    assert cards["month_label"] == "January 2026"
    assert cards["count"] == 3
    assert cards["profit"] == -20
    assert cards["profit_fmt"] == "-20.00 PLN"
    assert cards["profit_tone"] == "text-danger"
    assert cards["yield_fmt"] == "-28.57%"


def test_dashboard_for_an_empty_month():
    cards = dashboard_cards(_ledger(), date(2026, 3, 1))
    assert cards["count"] == 0
    assert cards["yield_fmt"] == "0.00%"
    assert cards["profit_tone"] == "text-secondary"


def test_recent_bets_newest_first_with_stable_ties():
    recent = recent_bets(_ledger(), limit=3)
    assert [b.id for b in recent] == [4, 3, 2]


def test_search_history_matches_text_fields():
    bets = _ledger()
    assert [b.id for b in search_history(bets, "sts")] == [2]
    assert [b.id for b in search_history(bets, "  boxing ")] == [1]
    assert [b.id for b in search_history(bets, "esports")] == [4]
    assert [b.id for b in search_history(bets, "")] == [4, 3, 2, 1]
    assert search_history(bets, "nothing like this") == []


def test_paginate_clamps_page():
    rows = list(range(7))
    first = paginate(rows, 1, 3)
    assert first["items"] == [0, 1, 2]
    assert (first["pages"], first["has_prev"], first["has_next"]) == (3, False, True)

    last = paginate(rows, 99, 3)
    assert last["page"] == 3 and last["items"] == [6]

    empty = paginate([], 0, 25)
    assert (empty["page"], empty["pages"], empty["items"]) == (1, 1, [])


def test_trend_series():
    series = trend_series(cumulative_trend(_ledger()))

    assert series["labels"] == ["Start", "30.12", "03.01", "05.01"]
    assert series["values"] == [0, 100, 50, 80]
    assert series["stakes"] == [0, 100, 50, 20]
    assert series["has_data"] and series["is_positive"]


def test_trend_series_without_settled_bets():
    series = trend_series(cumulative_trend([row(1, 10, "pending", 20)]))
    assert series["labels"] == ["Start"]
    assert not series["has_data"]


def test_stats_summary_rounds_for_display():
    summary = stats_summary(compute_stats(_ledger()), "PLN")

    assert summary["count"] == 4
    assert summary["settled_count"] == 3
    assert summary["total_staked_fmt"] == "170.00 PLN"
    assert summary["total_profit_fmt"] == "+80.00 PLN"
    assert summary["yield_fmt"] == "47.06%"
    assert summary["win_rate_fmt"] == "66.7%"
    assert [g["name"] for g in summary["by_category"]] == ["Football", "Tennis"]
    assert summary["by_category"][0]["profit_fmt"] == "+130.00 PLN"
