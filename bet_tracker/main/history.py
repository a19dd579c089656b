# bet_tracker/main/history.py
from datetime import date
from io import StringIO
import csv

from flask import render_template, request, Response, current_app

from ..main import main
from ..services import get_ledger
from ..services.views import search_history, paginate


@main.route("/history", methods=["GET"], endpoint="history_page")
def history_page():
    q = request.args.get("q") or ""
    page = request.args.get("page", 1, type=int)
    per_page = current_app.config.get("HISTORY_PER_PAGE", 25)

    rows = search_history(get_ledger().bets, q)
    pager = paginate(rows, page, per_page)

    return render_template(
        "history.html",
        page_title="History",
        q=q,
        pager=pager,
        rows=pager["items"],
    )


# ----------------------------
# EXPORT (CSV)
# ----------------------------
@main.route("/history/export.csv", methods=["GET"], endpoint="history_export")
def history_export():
    q = request.args.get("q") or ""
    rows = search_history(get_ledger().bets, q)

    si = StringIO()
    writer = csv.writer(si)
    writer.writerow(["Date", "Category", "Bookmaker", "Stake", "Odds", "Return", "Status", "Notes"])
    for b in rows:
        writer.writerow([
            b.occurred_at.strftime("%Y-%m-%d %H:%M"),
            b.category,
            b.bookmaker,
            f"{b.stake}",
            f"{b.odds}",
            f"{b.potential_return}",
            b.status.value,
            b.notes or "",
        ])
    output = si.getvalue().encode("utf-8")
    # the search term stays out of the header
    fname = f"bets_history_{date.today().isoformat()}.csv"
    return Response(output, mimetype="text/csv",
                    headers={"Content-Disposition": f'attachment; filename="{fname}"'})
