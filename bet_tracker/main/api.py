# bet_tracker/main/api.py
from flask import request, jsonify

from ..main import main
from ..services import get_ledger
from ..services.ledger_stats import LedgerFilter, compute_stats
from ..services.settlement import is_outcome_immediate, suggest_potential_return
from ..services.views import trend_series


@main.route("/api/stats", methods=["GET"])
def api_stats():
    flt = LedgerFilter.from_args(request.args)
    stats = compute_stats(get_ledger().bets, flt)
    payload = {
        **stats.to_dict(),
        "filter": {"month": flt.month, "bookmaker": flt.bookmaker, "category": flt.category},
    }
    return jsonify(payload)


@main.route("/api/trend", methods=["GET"])
def api_trend():
    return jsonify(trend_series(get_ledger().trend))


@main.route("/api/potential-return", methods=["GET"])
def api_potential_return():
    """Live stake x odds suggestion for the new-bet form."""
    category = request.args.get("category", "")
    if is_outcome_immediate(category):
        return jsonify({"potential_return": None})
    value = suggest_potential_return(request.args.get("stake"), request.args.get("odds"))
    return jsonify({"potential_return": f"{value:.2f}" if value is not None else None})
