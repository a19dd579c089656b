from __future__ import annotations
from datetime import datetime
from enum import Enum

from sqlalchemy import text
from .extensions import db


# --------------------------
# Enums (Python)
# --------------------------
class BetStatus(str, Enum):
    pending = "pending"
    won = "won"
    lost = "lost"
    void = "void"


SETTLED_STATUSES = (BetStatus.won, BetStatus.lost)


# --------------------------
# Bets (wagers & slot sessions)
# --------------------------
class Bet(db.Model):
    __tablename__ = "bets"
    __table_args__ = (
        db.Index("ix_bets_status_date", "status", "occurred_at"),
        db.Index("ix_bets_category_date", "category", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    occurred_at = db.Column(db.DateTime, nullable=False, index=True)

    stake = db.Column(db.Numeric(14, 2), nullable=False)
    odds = db.Column(db.Numeric(10, 4), nullable=False, server_default=text("1"))
    potential_return = db.Column(db.Numeric(14, 2), nullable=False, server_default=text("0"))

    bookmaker = db.Column(db.Text, nullable=False, index=True)
    category = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.Enum(BetStatus, name="bet_status_enum", native_enum=False),
        nullable=False,
        server_default=BetStatus.pending.value,
    )
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES

    @property
    def is_pending(self) -> bool:
        return self.status == BetStatus.pending

    def __repr__(self) -> str:
        return f"<Bet id={self.id} {self.category}/{self.bookmaker} {self.status.value if self.status else None}>"


# --------------------------
# Bankrolls (independent capital pools, never reconciled with bets)
# --------------------------
class Bankroll(db.Model):
    __tablename__ = "bankrolls"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(120), nullable=False, unique=True, index=True)
    initial_capital = db.Column(db.Numeric(14, 2), nullable=False, server_default=text("0"))
    current_balance = db.Column(db.Numeric(14, 2), nullable=False, server_default=text("0"))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


DEFAULT_BANKROLL_NAME = "Main Wallet"
DEFAULT_BANKROLL_CAPITAL = 1000


def ensure_default_bankroll() -> Bankroll:
    """Create the starter bankroll on a fresh database; no-op afterwards."""
    existing = Bankroll.query.order_by(Bankroll.id.asc()).first()
    if existing:
        return existing
    bankroll = Bankroll(
        name=DEFAULT_BANKROLL_NAME,
        initial_capital=DEFAULT_BANKROLL_CAPITAL,
        current_balance=DEFAULT_BANKROLL_CAPITAL,
    )
    db.session.add(bankroll)
    db.session.commit()
    return bankroll
