# bet_tracker/main/index.py
from datetime import date
from flask import render_template, current_app
from ..main import main
from ..services import get_ledger
from ..services.views import dashboard_cards, recent_bets, trend_series
from ..utils.helpers import get_page_title


@main.route("/", methods=["GET"])
def index():
    ledger = get_ledger()
    currency = current_app.config.get("CURRENCY_LABEL", "")

    cards = dashboard_cards(ledger.bets, date.today(), currency)
    recent = recent_bets(ledger.bets, current_app.config.get("RECENT_BETS_LIMIT", 5))

    return render_template(
        "index.html",
        cards=cards,
        recent=recent,
        trend=trend_series(ledger.trend),
        page_title=get_page_title(),
    )
