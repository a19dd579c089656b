# bet_tracker/main/bets.py
# ---------------------------------
# Add / edit / delete / quick-settle bets. Every write goes through the
# BetStore; nothing on screen changes unless the store commit succeeded.
import logging
from datetime import datetime
from urllib.parse import urlparse

from flask import request, redirect, url_for, flash, abort, render_template, current_app

from ..main import main
from ..models import BetStatus
from ..services import get_store
from ..services.settlement import parse_bet_form, validate_quick_settle, is_outcome_immediate
from ..services.store import StoreError
from ..utils.helpers import wants_confirmation

logger = logging.getLogger(__name__)


def _get_bet_or_404(bet_id: int):
    bet = get_store().get(bet_id)
    if not bet:
        abort(404)
    return bet


def _local_url(target: str | None) -> str | None:
    """`target` if it points back into this site, else None."""
    if not target:
        return None
    parts = urlparse(target.replace("\\", "/"))
    if parts.scheme not in ("", "http", "https"):
        return None
    if parts.netloc and parts.netloc != request.host:
        return None
    return target


def _back(default_endpoint: str = "main.index"):
    target = _local_url(request.form.get("next")) or _local_url(request.referrer)
    return redirect(target or url_for(default_endpoint))


def _form_values_for(bet) -> dict:
    """Pre-fill values for the edit form."""
    immediate = is_outcome_immediate(bet.category)
    return {
        "occurred_at": bet.occurred_at.strftime("%Y-%m-%dT%H:%M"),
        "bookmaker": bet.bookmaker,
        "category": bet.category,
        "stake": f"{bet.stake}",
        # slot sessions store 1.0, which the form hides
        "odds": "" if immediate else f"{bet.odds}",
        "potential_return": f"{bet.potential_return}",
        "status": bet.status.value,
        "notes": bet.notes or "",
    }


def _blank_form_values() -> dict:
    categories = current_app.config.get("BET_CATEGORIES") or [""]
    return {
        "occurred_at": datetime.now().strftime("%Y-%m-%dT%H:%M"),
        "bookmaker": current_app.config.get("DEFAULT_BOOKMAKER", ""),
        "category": categories[0],
        "stake": "",
        "odds": "",
        "potential_return": "",
        "status": "",
        "notes": "",
    }


def _render_form(values: dict, errors: dict, bet=None):
    return render_template(
        "bets/form.html",
        page_title="Edit Bet" if bet else "New Bet",
        bet=bet,
        values=values,
        errors=errors,
        categories=current_app.config.get("BET_CATEGORIES", []),
        immediate_categories=current_app.config.get("OUTCOME_IMMEDIATE_CATEGORIES", []),
        statuses=[s.value for s in BetStatus],
        next_url=request.values.get("next") or request.referrer or "",
    )


# ---------------------------
# Bets (CREATE)
# ---------------------------
@main.route("/bets/new", methods=["GET", "POST"], endpoint="bet_new")
def bet_new():
    if request.method == "GET":
        return _render_form(_blank_form_values(), {})

    result = parse_bet_form(request.form)
    if not result.ok:
        return _render_form(request.form.to_dict(), result.errors), 400

    try:
        get_store().add(result.fields)
    except StoreError:
        logger.exception("[bets] create failed")
        flash("Could not save the bet.", "danger")
        return _render_form(request.form.to_dict(), {}), 500

    flash("Bet added.", "success")
    return redirect(_local_url(request.form.get("next")) or url_for("main.index"))


# ---------------------------
# Bets (UPDATE)
# ---------------------------
@main.route("/bets/<int:bet_id>/edit", methods=["GET", "POST"], endpoint="bet_edit")
def bet_edit(bet_id: int):
    bet = _get_bet_or_404(bet_id)
    if request.method == "GET":
        return _render_form(_form_values_for(bet), {}, bet=bet)

    result = parse_bet_form(request.form, existing=bet)
    if not result.ok:
        return _render_form(request.form.to_dict(), result.errors, bet=bet), 400

    try:
        get_store().update(bet_id, result.fields)
    except StoreError:
        logger.exception(f"[bets] update failed for id={bet_id}")
        flash("Could not save the changes.", "danger")
        return _render_form(request.form.to_dict(), {}, bet=bet), 500

    flash("Bet updated.", "success")
    return redirect(_local_url(request.form.get("next")) or url_for("main.history_page"))


# ---------------------------
# Bets (DELETE)
# ---------------------------
@main.route("/bets/<int:bet_id>/delete", methods=["POST"], endpoint="bet_delete")
def bet_delete(bet_id: int):
    _get_bet_or_404(bet_id)
    if not wants_confirmation(request.form):
        flash("Deletion cancelled.", "info")
        return _back()

    try:
        get_store().delete(bet_id)
    except StoreError:
        logger.exception(f"[bets] delete failed for id={bet_id}")
        flash("Could not delete the bet.", "danger")
        return _back()

    flash("Bet deleted.", "success")
    return _back()


# ---------------------------
# Bets (QUICK SETTLE)
# ---------------------------
@main.route("/bets/<int:bet_id>/settle/<status>", methods=["POST"], endpoint="bet_settle")
def bet_settle(bet_id: int, status: str):
    bet = _get_bet_or_404(bet_id)
    ok, message = validate_quick_settle(bet, status)
    if not ok:
        flash(message, "warning")
        return _back()

    try:
        get_store().update(bet_id, {"status": BetStatus(status)})
    except StoreError:
        logger.exception(f"[bets] quick settle failed for id={bet_id}")
        flash("Could not settle the bet.", "danger")
        return _back()

    flash(f"Bet marked as {status}.", "success")
    return _back()
