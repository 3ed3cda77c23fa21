import logging
from flask import Blueprint, request, jsonify
from utils.decorators import admin_required, member_required
from utils.recent_groups import remember_group
from services.member_service import add_member, InvalidMemberDataError
from services.settlement_service import BalanceIntegrityError
from routes.groups import group_payload
from models import db

logger = logging.getLogger(__name__)

members_bp = Blueprint("members", __name__)


@members_bp.route("/g/<slug>/admin/<admin_token>/members", methods=["POST"])
@admin_required
def add_member_route(group):
    data = request.get_json(silent=True) or {}
    try:
        member = add_member(db.session, group.id, data.get("name"))
        return jsonify({
            "id": member.id,
            "name": member.name,
            "url": member.member_path,
        }), 201
    except InvalidMemberDataError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        logger.exception("Failed to add member to group %s", group.id)
        return jsonify({"error": "Failed to add member"}), 500


@members_bp.route("/g/<slug>/m/<member_token>", methods=["GET"])
@member_required
def member_page(group, member):
    try:
        response = jsonify(group_payload(group, member=member))
    except BalanceIntegrityError:
        logger.exception("Balance integrity violated in group %s", group.id)
        return jsonify({"error": "Balance integrity violated"}), 500
    except Exception:
        db.session.rollback()
        logger.exception("Failed to load group %s for member %s", group.id, member.id)
        return jsonify({"error": "Failed to load group"}), 500

    return remember_group(
        request,
        response,
        group.name,
        member.member_path,
        "member",
        member_name=member.name,
    )
