# bet_tracker/main/stats.py
from flask import render_template, request, current_app

from ..main import main
from ..services import get_ledger
from ..services.ledger_stats import ALL, LedgerFilter, compute_stats, filter_options
from ..services.views import month_label, stats_summary


@main.route("/stats", methods=["GET"], endpoint="stats_page")
def stats_page():
    bets = get_ledger().bets
    flt = LedgerFilter.from_args(request.args)
    stats = compute_stats(bets, flt)
    options = filter_options(bets)

    return render_template(
        "stats.html",
        page_title="Statistics",
        flt=flt,
        ALL=ALL,
        options=options,
        month_options=[(m, month_label(m)) for m in options["months"]],
        summary=stats_summary(stats, current_app.config.get("CURRENCY_LABEL", "")),
    )
