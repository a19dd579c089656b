# bet_tracker/services/__init__.py
from flask import current_app


def get_store():
    """The app-wide BetStore created in register_extensions()."""
    return current_app.extensions["bet_store"]


def get_ledger():
    """The LiveLedger subscribed to get_store()."""
    return current_app.extensions["live_ledger"]
