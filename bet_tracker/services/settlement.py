# bet_tracker/services/settlement.py
"""
Settlement rules and bet form parsing.

Odds-based categories (football, tennis, ...) start `pending` and are settled
later, either with a quick settle or from the edit form. Outcome-immediate
categories (slot sessions) get their status straight from the numbers:
more back than deposited is a win, less is a loss, equal is void.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from flask import current_app

from ..models import Bet, BetStatus

TWO_PLACES = Decimal("0.01")
ODDS_PLACES = Decimal("0.0001")  # Numeric(10, 4)
FORM_DATETIME = "%Y-%m-%dT%H:%M"  # <input type="datetime-local">
QUICK_SETTLE_STATUSES = (BetStatus.won, BetStatus.lost)


@dataclass
class BetFormResult:
    ok: bool
    fields: dict = field(default_factory=dict)
    errors: dict = field(default_factory=dict)


def _safe_decimal(s: str | None) -> Optional[Decimal]:
    if s is None or str(s).strip() == "":
        return None
    try:
        value = Decimal(str(s).strip().replace(",", "."))
    except (InvalidOperation, ValueError):
        return None
    return value if value.is_finite() else None


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _immediate_categories(categories: Optional[Iterable[str]]) -> set[str]:
    if categories is None:
        categories = current_app.config.get("OUTCOME_IMMEDIATE_CATEGORIES", [])
    return {c.strip().lower() for c in categories}


def is_outcome_immediate(category: str, categories: Optional[Iterable[str]] = None) -> bool:
    return (category or "").strip().lower() in _immediate_categories(categories)


def outcome_status(deposit, final_return) -> BetStatus:
    """Status of a session whose payout is already known."""
    deposit, final_return = _money(deposit), _money(final_return)
    if final_return > deposit:
        return BetStatus.won
    if final_return < deposit:
        return BetStatus.lost
    return BetStatus.void


def suggest_potential_return(stake, odds) -> Optional[Decimal]:
    """stake x odds rounded to cents, or None when either side is unusable."""
    stake, odds = _safe_decimal(stake), _safe_decimal(odds)
    if stake is None or odds is None or stake <= 0 or odds <= 0:
        return None
    return _money(stake * odds)


def _parse_when(raw: str) -> datetime:
    return datetime.strptime(raw.strip(), FORM_DATETIME)


def parse_bet_form(
    form,
    existing: Optional[Bet] = None,
    immediate_categories: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
) -> BetFormResult:
    """
    Validate an add/edit form and derive the stored fields.

    `form` is any mapping with .get() (request.form in the routes). With
    `existing` set this is an edit: blank numeric fields keep their stored
    values and the return is never recomputed from stake x odds.
    """
    errors: dict[str, str] = {}
    editing = existing is not None

    # --- timestamp ---
    raw_when = (form.get("occurred_at") or "").strip()
    occurred_at = None
    if raw_when:
        try:
            occurred_at = _parse_when(raw_when)
        except ValueError:
            errors["occurred_at"] = "Invalid date/time."
    elif editing:
        occurred_at = existing.occurred_at
    else:
        occurred_at = (now or datetime.now()).replace(second=0, microsecond=0)

    # --- text fields ---
    bookmaker = (form.get("bookmaker") or "").strip()
    category = (form.get("category") or "").strip()
    notes = (form.get("notes") or "").strip() or None
    if not bookmaker:
        errors["bookmaker"] = "Bookmaker is required."
    if not category:
        errors["category"] = "Category is required."

    # --- stake (always required, even on edit) ---
    # compared after rounding to what the column stores
    stake = _safe_decimal(form.get("stake"))
    if stake is None:
        errors["stake"] = "Stake is required."
    else:
        stake = _money(stake)
        if stake <= 0:
            errors["stake"] = "Stake must be at least 0.01."

    immediate = is_outcome_immediate(category, immediate_categories)

    # --- odds ---
    if immediate:
        odds = Decimal("1.0")
    else:
        odds = _safe_decimal(form.get("odds"))
        if odds is None and editing:
            odds = Decimal(existing.odds)
        if odds is None:
            errors["odds"] = "Odds are required."
        else:
            odds = odds.quantize(ODDS_PLACES, rounding=ROUND_HALF_UP)
            if odds <= 0:
                errors["odds"] = "Odds must be greater than zero."

    # --- return ---
    potential_return = _safe_decimal(form.get("potential_return"))
    if potential_return is not None and potential_return < 0:
        errors["potential_return"] = "Return cannot be negative."
    elif potential_return is None:
        if editing:
            potential_return = Decimal(existing.potential_return)
        elif immediate:
            # nothing cashed out
            potential_return = Decimal("0")
        elif "stake" not in errors and "odds" not in errors:
            potential_return = suggest_potential_return(stake, odds)
        if potential_return is None and "stake" not in errors and "odds" not in errors:
            errors["potential_return"] = "Return is required."

    # --- status ---
    status = None
    requested = (form.get("status") or "").strip().lower()
    if requested and requested not in BetStatus.__members__:
        errors["status"] = "Unknown status."

    if errors:
        return BetFormResult(False, errors=errors)

    if immediate:
        status = outcome_status(stake, potential_return)
    elif editing:
        status = BetStatus(requested) if requested else existing.status
    else:
        status = BetStatus.pending

    fields = dict(
        occurred_at=occurred_at,
        bookmaker=bookmaker,
        category=category,
        stake=stake,
        odds=odds,
        potential_return=_money(potential_return),
        status=status,
        notes=notes,
    )
    return BetFormResult(True, fields=fields)


def validate_quick_settle(bet: Bet, target: str) -> Tuple[bool, str]:
    """Quick settle only moves a pending bet to won or lost."""
    try:
        status = BetStatus(target)
    except ValueError:
        return False, "Quick settle accepts only 'won' or 'lost'."
    if status not in QUICK_SETTLE_STATUSES:
        return False, "Quick settle accepts only 'won' or 'lost'."
    if bet.status != BetStatus.pending:
        return False, "Only pending bets can be quick-settled."
    return True, "OK"
