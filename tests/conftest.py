from datetime import datetime
from decimal import Decimal

import pytest

from bet_tracker import create_app
from bet_tracker.config import Testing
from bet_tracker.extensions import db
from bet_tracker.models import BetStatus
from bet_tracker.services.live import BetRow


@pytest.fixture
def app(tmp_path):
    class _Config(Testing):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'bets.db'}"

    app = create_app(_Config)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["bet_store"]


def bet_fields(**overrides) -> dict:
    fields = dict(
        occurred_at=datetime(2026, 1, 10, 18, 30),
        stake=Decimal("50.00"),
        odds=Decimal("2.0"),
        potential_return=Decimal("100.00"),
        bookmaker="Betclic",
        category="Football",
        status=BetStatus.pending,
        notes=None,
    )
    fields.update(overrides)
    return fields


def row(bet_id, stake, status, potential_return=0, *, when=None, category="Football",
        bookmaker="Betclic", odds=2.0, notes=None) -> BetRow:
    return BetRow(
        id=bet_id,
        occurred_at=when or datetime(2026, 1, bet_id, 12, 0),
        stake=Decimal(str(stake)),
        odds=Decimal(str(odds)),
        potential_return=Decimal(str(potential_return)),
        bookmaker=bookmaker,
        category=category,
        status=BetStatus(status),
        notes=notes,
    )
