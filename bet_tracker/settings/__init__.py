# bet_tracker/settings/__init__.py
from flask import Blueprint

settings = Blueprint("settings", __name__)

# Import routes so decorators run (keep at end)
from . import routes  # noqa: E402,F401
