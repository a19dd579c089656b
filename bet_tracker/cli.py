# bet_tracker/cli.py
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

import click

from .extensions import db
from .models import BetStatus, ensure_default_bankroll
from .services.backup import BackupFormatError, dumps_backup, restore_backup
from .services.store import BetStore, StoreError


def register_cli(app):
    def _store() -> BetStore:
        return app.extensions["bet_store"]

    @app.cli.command("init-db")
    def init_db():
        """Create tables and the starter bankroll."""
        db.create_all()
        bankroll = ensure_default_bankroll()
        click.echo(f"Database ready (bankroll: {bankroll.name}).")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Dev-only: a handful of bets across categories and statuses."""
        db.create_all()
        ensure_default_bankroll()
        store = _store()
        if store.count():
            click.echo("Bets already present; nothing seeded.")
            return

        start = datetime.now().replace(second=0, microsecond=0) - timedelta(days=20)
        samples = [
            ("Football", "Betclic", "50", "2.10", "105.00", BetStatus.won, "Derby, home win"),
            ("Tennis", "STS", "30", "1.85", "55.50", BetStatus.lost, None),
            ("Basketball", "Betclic", "40", "1.95", "78.00", BetStatus.won, None),
            ("Esports", "Fortuna", "20", "2.50", "50.00", BetStatus.void, "Match cancelled"),
            ("Slots", "Total Casino", "100", "1.0", "60.00", BetStatus.lost, "Evening session"),
            ("Football", "STS", "25", "3.20", "80.00", BetStatus.pending, None),
        ]
        for i, (category, bookmaker, stake, odds, ret, status, notes) in enumerate(samples):
            store.add(dict(
                occurred_at=start + timedelta(days=i * 3, hours=i),
                category=category,
                bookmaker=bookmaker,
                stake=Decimal(stake),
                odds=Decimal(odds),
                potential_return=Decimal(ret),
                status=status,
                notes=notes,
            ))
        click.echo(f"Seeded {len(samples)} bets.")

    @app.cli.command("export-backup")
    @click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
    def export_backup(path: Path):
        """Write every bet to PATH as a JSON backup."""
        bets = _store().all()
        path.write_text(dumps_backup(bets), encoding="utf-8")
        click.echo(f"Exported {len(bets)} bet(s) to {path}.")

    @app.cli.command("restore-backup")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
    @click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
    def restore_backup_cmd(path: Path, yes: bool):
        """Replace ALL bets with the contents of PATH."""
        if not yes and not click.confirm("This overwrites every bet in the database. Continue?"):
            click.echo("Cancelled; nothing changed.")
            return
        try:
            count = restore_backup(_store(), path.read_bytes())
        except BackupFormatError as e:
            raise click.ClickException(f"Invalid backup: {e}")
        except StoreError as e:
            raise click.ClickException(str(e))
        click.echo(f"Restored {count} bet(s).")
