# bet_tracker/services/backup.py
"""
JSON backup of the bet collection.

Format: a UTF-8 JSON array, one object per bet, with `occurredAt` as an
ISO-8601 string and every other field as-is. Files written by the older
browser version of the tracker use `date` instead of `occurredAt` and UTC
timestamps ending in `Z`; both are accepted on restore.
"""
from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, List

from ..models import BetStatus
from .store import BetStore

REQUIRED_KEYS = ("stake", "potentialReturn", "bookmaker", "category", "status")


class BackupFormatError(ValueError):
    """The document is not a bet backup; nothing was changed."""


def backup_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"bet-tracker-backup-{today.isoformat()}.json"


def _number(value):
    # JSON has no decimal type; 2-decimal amounts survive a float round trip
    return float(value) if isinstance(value, Decimal) else value


def bet_to_dict(bet) -> dict:
    return {
        "id": bet.id,
        "occurredAt": bet.occurred_at.isoformat(),
        "stake": _number(bet.stake),
        "odds": _number(bet.odds),
        "potentialReturn": _number(bet.potential_return),
        "bookmaker": bet.bookmaker,
        "category": bet.category,
        "status": BetStatus(bet.status).value,
        "notes": bet.notes,
    }


def dumps_backup(bets: Iterable) -> str:
    return json.dumps([bet_to_dict(b) for b in bets], indent=2, ensure_ascii=False)


# ---------------------------
# Restore
# ---------------------------
def _parse_timestamp(raw, idx: int) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        raise BackupFormatError(f"Entry {idx}: missing timestamp.")
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        when = datetime.fromisoformat(text)
    except ValueError:
        raise BackupFormatError(f"Entry {idx}: invalid timestamp {raw!r}.") from None
    if when.tzinfo is not None:
        # stored times are naive local wall-clock
        when = when.astimezone().replace(tzinfo=None)
    return when


def _parse_amount(raw, idx: int, key: str) -> Decimal:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise BackupFormatError(f"Entry {idx}: '{key}' must be a number.")
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        raise BackupFormatError(f"Entry {idx}: '{key}' must be a number.") from None
    if not value.is_finite() or value < 0:
        raise BackupFormatError(f"Entry {idx}: '{key}' must be a non-negative number.")
    return value


def _parse_entry(item, idx: int) -> dict:
    if not isinstance(item, dict):
        raise BackupFormatError(f"Entry {idx} is not an object.")
    missing = [k for k in REQUIRED_KEYS if k not in item]
    if "occurredAt" not in item and "date" not in item:
        missing.insert(0, "occurredAt")
    if missing:
        raise BackupFormatError(f"Entry {idx} is missing: {', '.join(missing)}.")

    for key in ("bookmaker", "category"):
        if not isinstance(item[key], str):
            raise BackupFormatError(f"Entry {idx}: '{key}' must be text.")
    try:
        status = BetStatus(item["status"])
    except ValueError:
        raise BackupFormatError(f"Entry {idx}: unknown status {item['status']!r}.") from None

    notes = item.get("notes")
    if notes is not None and not isinstance(notes, str):
        raise BackupFormatError(f"Entry {idx}: 'notes' must be text.")

    row = dict(
        occurred_at=_parse_timestamp(item.get("occurredAt", item.get("date")), idx),
        stake=_parse_amount(item["stake"], idx, "stake"),
        odds=_parse_amount(item.get("odds", 1.0), idx, "odds"),
        potential_return=_parse_amount(item["potentialReturn"], idx, "potentialReturn"),
        bookmaker=item["bookmaker"],
        category=item["category"],
        status=status,
        notes=notes,
    )

    bet_id = item.get("id")
    if bet_id is not None:
        if isinstance(bet_id, bool) or not isinstance(bet_id, int) or bet_id <= 0:
            raise BackupFormatError(f"Entry {idx}: 'id' must be a positive integer.")
        row["id"] = bet_id
    return row


def parse_backup(content) -> List[dict]:
    """Validate a whole document up front; raises BackupFormatError."""
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise BackupFormatError("File is not UTF-8 text.") from None
    try:
        data = json.loads(content)
    except (TypeError, ValueError) as e:
        raise BackupFormatError(f"File is not valid JSON: {e}") from None

    if not isinstance(data, list):
        raise BackupFormatError("Backup must be a JSON array of bets.")

    rows = [_parse_entry(item, idx) for idx, item in enumerate(data, start=1)]

    ids = [r["id"] for r in rows if "id" in r]
    if len(ids) != len(set(ids)):
        raise BackupFormatError("Backup contains duplicate bet ids.")
    return rows


def restore_backup(store: BetStore, content) -> int:
    """Replace every bet with the backup's contents. Destructive."""
    rows = parse_backup(content)
    return store.replace_all(rows)
