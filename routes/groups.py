import logging
from flask import Blueprint, request, jsonify, current_app
from utils.decorators import admin_required
from utils.helpers import format_cents
from utils.recent_groups import (
    read_recent_groups,
    remove_recent_group,
    remember_group,
    write_recent_groups,
)
from services.group_service import (
    create_group,
    rename_group,
    delete_group,
    InvalidGroupDataError,
)
from services.member_service import get_group_members
from services.expense_service import get_group_expenses
from services.ledger_service import get_group_balances, settlements_involving
from services.settlement_service import BalanceIntegrityError
from models import db

logger = logging.getLogger(__name__)

groups_bp = Blueprint("groups", __name__)


def display(cents):
    return format_cents(cents, current_app.config["CURRENCY_SYMBOL"])


def group_payload(group, member=None):
    """
    Everything a group page shows.

    Admin view (member=None) includes invite links and all settlements;
    a member only sees settlements they take part in.
    """
    members = get_group_members(db.session, group.id)
    expenses = get_group_expenses(db.session, group.id)
    ledger = get_group_balances(
        db.session,
        group.id,
        strict=current_app.config["STRICT_BALANCE_CHECKS"],
    )

    settlements = ledger["settlements"]
    if member is not None:
        settlements = settlements_involving(settlements, member.id)

    payload = {
        "group": {"id": group.id, "name": group.name, "slug": group.slug},
        "members": [
            {"id": m.id, "name": m.name}
            if member is not None
            else {"id": m.id, "name": m.name, "url": m.member_path}
            for m in members
        ],
        "expenses": [
            dict(
                e,
                created_at=e["created_at"].isoformat(),
                display=display(e["amount"]),
            )
            for e in expenses
        ],
        "balances": [
            dict(b, display=display(b["net"]))
            for b in ledger["balances"]
        ],
        "settlements": [
            dict(s, display=display(s["amount"]))
            for s in settlements
        ],
    }
    if member is not None:
        payload["member"] = {"id": member.id, "name": member.name}
    else:
        payload["group"]["admin_url"] = group.admin_path
    return payload


@groups_bp.route("/api/groups", methods=["POST"])
def api_create_group():
    data = request.get_json(silent=True) or {}
    try:
        group = create_group(
            db.session,
            data.get("name"),
            max_attempts=current_app.config["SLUG_MAX_ATTEMPTS"],
        )
        return jsonify({
            "id": group.id,
            "name": group.name,
            "slug": group.slug,
            "admin_token": group.admin_token,
            "admin_url": group.admin_path,
        }), 201
    except InvalidGroupDataError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        logger.exception("Failed to create group")
        return jsonify({"error": "Failed to create group"}), 500


@groups_bp.route("/g/<slug>/admin/<admin_token>", methods=["GET"])
@admin_required
def admin_page(group):
    try:
        response = jsonify(group_payload(group))
    except BalanceIntegrityError:
        logger.exception("Balance integrity violated in group %s", group.id)
        return jsonify({"error": "Balance integrity violated"}), 500
    except Exception:
        db.session.rollback()
        logger.exception("Failed to load group %s", group.id)
        return jsonify({"error": "Failed to load group"}), 500

    return remember_group(request, response, group.name, group.admin_path, "admin")


@groups_bp.route("/g/<slug>/admin/<admin_token>", methods=["PATCH"])
@admin_required
def rename_group_route(group):
    data = request.get_json(silent=True) or {}
    try:
        rename_group(db.session, group, data.get("name"))
        return jsonify({"id": group.id, "name": group.name})
    except InvalidGroupDataError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        logger.exception("Failed to rename group %s", group.id)
        return jsonify({"error": "Failed to rename group"}), 500


@groups_bp.route("/g/<slug>/admin/<admin_token>", methods=["DELETE"])
@admin_required
def delete_group_route(group):
    url = group.admin_path
    try:
        delete_group(db.session, group)
    except Exception:
        logger.exception("Failed to delete group %s", group.id)
        return jsonify({"error": "Failed to delete group"}), 500

    response = jsonify({"status": "deleted"})
    return write_recent_groups(response, remove_recent_group(read_recent_groups(request), url))


@groups_bp.route("/api/recent", methods=["GET"])
def recent_groups():
    return jsonify(read_recent_groups(request))


@groups_bp.route("/api/recent", methods=["DELETE"])
def remove_recent():
    data = request.get_json(silent=True) or {}
    url = data.get("url")
    if not url:
        return jsonify({"error": "url is required"}), 400

    groups = remove_recent_group(read_recent_groups(request), url)
    return write_recent_groups(jsonify(groups), groups)
