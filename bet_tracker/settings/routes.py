# bet_tracker/settings/routes.py
# ---------------------------------
# Data management: JSON backup / restore and bankroll bookkeeping.
import logging
from decimal import Decimal, InvalidOperation

from flask import render_template, request, redirect, url_for, flash, Response
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import Bankroll
from ..services import get_store
from ..services.backup import BackupFormatError, backup_filename, dumps_backup, restore_backup
from ..services.store import StoreError
from ..utils.helpers import wants_confirmation
from . import settings

logger = logging.getLogger(__name__)


def _parse_money(raw: str | None):
    try:
        return Decimal((raw or "").strip() or "0").quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


@settings.route("/", methods=["GET"], endpoint="settings_page")
def settings_page():
    bankrolls = Bankroll.query.order_by(Bankroll.name.asc()).all()
    return render_template(
        "settings/index.html",
        page_title="Settings",
        bankrolls=bankrolls,
        bet_count=get_store().count(),
    )


# ---------------------------
# Backup (EXPORT)
# ---------------------------
@settings.route("/export", methods=["GET"], endpoint="backup_export")
def backup_export():
    try:
        payload = dumps_backup(get_store().all())
    except SQLAlchemyError:
        logger.exception("[backup] export failed")
        flash("Export failed.", "danger")
        return redirect(url_for("settings.settings_page"))

    return Response(
        payload.encode("utf-8"),
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


# ---------------------------
# Backup (RESTORE), destructive
# ---------------------------
@settings.route("/import", methods=["POST"], endpoint="backup_import")
def backup_import():
    upload = request.files.get("backup")
    if upload is None or not upload.filename:
        flash("Choose a backup file first.", "warning")
        return redirect(url_for("settings.settings_page"))

    if not wants_confirmation(request.form):
        flash("Import cancelled. Your data was not changed.", "info")
        return redirect(url_for("settings.settings_page"))

    try:
        restored = restore_backup(get_store(), upload.read())
    except BackupFormatError as e:
        logger.warning(f"[backup] rejected import '{upload.filename}': {e}")
        flash(f"Invalid backup file: {e} Make sure it is a .json file exported by this app.", "danger")
        return redirect(url_for("settings.settings_page"))
    except StoreError:
        logger.exception("[backup] restore failed")
        flash("Restore failed. Your data was not changed.", "danger")
        return redirect(url_for("settings.settings_page"))

    flash(f"Backup restored: {restored} bet(s).", "success")
    return redirect(url_for("main.index"))


# ---------------------------
# Bankrolls (CREATE / UPDATE)
# ---------------------------
@settings.route("/bankrolls", methods=["POST"], endpoint="bankroll_create")
def bankroll_create():
    name = (request.form.get("name") or "").strip()
    capital = _parse_money(request.form.get("initial_capital"))
    if not name:
        flash("Bankroll name is required.", "warning")
        return redirect(url_for("settings.settings_page"))
    if capital is None:
        flash("Initial capital must be a number.", "warning")
        return redirect(url_for("settings.settings_page"))

    db.session.add(Bankroll(name=name, initial_capital=capital, current_balance=capital))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        flash(f"A bankroll named '{name}' already exists.", "warning")
        return redirect(url_for("settings.settings_page"))
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("[bankroll] create failed")
        flash("Could not save the bankroll.", "danger")
        return redirect(url_for("settings.settings_page"))

    flash("Bankroll added.", "success")
    return redirect(url_for("settings.settings_page"))


@settings.route("/bankrolls/<int:bankroll_id>", methods=["POST"], endpoint="bankroll_update")
def bankroll_update(bankroll_id: int):
    bankroll = db.session.get(Bankroll, bankroll_id)
    if not bankroll:
        flash("Bankroll not found.", "warning")
        return redirect(url_for("settings.settings_page"))

    balance = _parse_money(request.form.get("current_balance"))
    if balance is None:
        flash("Balance must be a number.", "warning")
        return redirect(url_for("settings.settings_page"))

    bankroll.current_balance = balance
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(f"[bankroll] update failed for id={bankroll_id}")
        flash("Could not update the bankroll.", "danger")
        return redirect(url_for("settings.settings_page"))

    flash("Balance updated.", "success")
    return redirect(url_for("settings.settings_page"))
