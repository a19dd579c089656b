# bet_tracker/__init__.py
# ------------------------------------------------------------
# Flask application factory with layered registration:
# - configure_logging()
# - register_extensions()   (db, migrate, bet store + live ledger)
# - init_database()         (create_all + starter bankroll)
# - register_blueprints()
# - register_template_filters()
# - register_context_processors()
# - register_cli()
# - register_error_handlers()
# ------------------------------------------------------------

import logging
import os
from dotenv import load_dotenv

from flask import Flask, url_for, request, render_template

from .config import Config
from .extensions import db, migrate
from .models import Bet, Bankroll, BetStatus  # ensure models registered
from .navigation import MENU

# Load environment from .env exactly once
load_dotenv()

logger = logging.getLogger(__name__)


def create_app(config_object=None) -> Flask:
    app = Flask(__name__)
    if config_object is None:
        env = os.getenv("FLASK_ENV", "development").lower()
        config_object = "bet_tracker.config.Production" if env == "production" else "bet_tracker.config.Development"
    app.config.from_object(config_object)

    configure_logging(app)
    register_extensions(app)
    init_database(app)
    register_blueprints(app)
    register_template_filters(app)
    register_context_processors(app)
    register_cli(app)
    register_error_handlers(app)
    return app


# ---------------------------
# Registrations (by concern)
# ---------------------------
def configure_logging(app: Flask) -> None:
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("bet_tracker").setLevel(level)


def register_extensions(app: Flask) -> None:
    """Initialize db + migrate, then the bet store and its live ledger."""
    from .services.store import BetStore
    from .services.live import LiveLedger

    db.init_app(app)
    migrate.init_app(app, db)

    store = BetStore()
    app.extensions["bet_store"] = store
    app.extensions["live_ledger"] = LiveLedger(store)

    @app.before_request
    def _drop_stale_snapshot():
        # the CLI and other workers write to the same database
        app.extensions["live_ledger"].invalidate()


def init_database(app: Flask) -> None:
    """Create missing tables and the starter bankroll (first run only)."""
    from .models import ensure_default_bankroll

    with app.app_context():
        db.create_all()
        ensure_default_bankroll()


def register_blueprints(app: Flask) -> None:
    """
    Register all blueprints. Keep imports local to avoid circulars.
    """
    from .main import main as main_blueprint
    from .settings import settings as settings_blueprint

    app.register_blueprint(main_blueprint)                              # /, /history, /stats, /bets/...
    app.register_blueprint(settings_blueprint, url_prefix="/settings")  # /settings/...


def register_template_filters(app: Flask) -> None:
    """Add Jinja filters and globals."""

    def _money(value):
        """Format a number with two decimals and thousands separators."""
        try:
            return "{:,.2f}".format(float(value))
        except (ValueError, TypeError):
            return value

    def _odds(value):
        try:
            return "{:.2f}".format(float(value))
        except (ValueError, TypeError):
            return value

    def _status_label(status) -> str:
        value = getattr(status, "value", status)
        return "IN PLAY" if value == BetStatus.pending.value else str(value).upper()

    def _status_class(status) -> str:
        value = getattr(status, "value", status)
        return {
            "pending": "bg-warning-subtle text-warning",
            "won": "bg-success-subtle text-success",
            "lost": "bg-danger-subtle text-danger",
        }.get(value, "bg-secondary-subtle text-secondary")

    def _datetime_local(value) -> str:
        return value.strftime("%Y-%m-%dT%H:%M") if value else ""

    app.add_template_filter(_money, name="money")
    app.add_template_filter(_odds, name="odds")
    app.add_template_filter(_status_label, name="status_label")
    app.add_template_filter(_status_class, name="status_class")
    app.add_template_filter(_datetime_local, name="datetime_local")

    app.jinja_env.globals["currency_label"] = app.config.get("CURRENCY_LABEL", "")


def register_context_processors(app: Flask) -> None:
    """Inject navigation menu (with active state) into templates."""

    def normalize_href(item: dict) -> str:
        if "endpoint" in item:
            try:
                return url_for(item["endpoint"])
            except Exception:
                return "#"  # endpoint missing; avoid crash during dev
        return item.get("url", "#")

    def is_active(endpoint_name: str | None, href: str | None = None) -> bool:
        if endpoint_name and request.endpoint == endpoint_name:
            return True
        if href and href != "#" and request.path == href:
            return True
        return False

    def built_menu() -> list[dict]:
        out: list[dict] = []
        for it in MENU:
            new_it = dict(it)
            new_it["_href"] = normalize_href(it)
            new_it["_active"] = is_active(it.get("endpoint"), new_it["_href"])
            out.append(new_it)
        return out

    @app.context_processor
    def _inject_navigation():
        # return the menu DATA, not the function
        return dict(menu=built_menu())


def register_cli(app: Flask) -> None:
    """Register custom CLI commands."""
    from .cli import register_cli as _register_cli
    _register_cli(app)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(e):
        return render_template("errors/404.html", page_title="Not Found"), 404

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        logger.error(f"[app] unhandled error on {request.path}: {e}")
        return render_template("errors/500.html", page_title="Error"), 500
