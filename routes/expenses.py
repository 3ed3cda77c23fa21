import logging
from flask import Blueprint, request, jsonify
from utils.decorators import admin_required, member_required
from utils.helpers import parse_amount
from services.expense_service import (
    create_expense,
    update_expense,
    delete_expense,
    InvalidExpenseDataError,
    ExpenseNotFoundError,
)
from models import db

logger = logging.getLogger(__name__)

expenses_bp = Blueprint("expenses", __name__)


def _member_id(value):
    # IDs may arrive as numeric strings; fractional values never truncate
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(value)
    return int(value)


def _expense_fields(data):
    """
    Pull expense fields out of a JSON body.

    Raises:
        InvalidExpenseDataError: If amount or member IDs aren't numbers
    """
    try:
        amount = parse_amount(data.get("amount"))
    except ValueError:
        raise InvalidExpenseDataError("Amount must be a number")

    try:
        paid_by = _member_id(data["paid_by"]) if data.get("paid_by") else None
        split_among = data.get("split_among") or []
        if not isinstance(split_among, list):
            raise TypeError(split_among)
        split_among = [_member_id(uid) for uid in split_among]
    except (TypeError, ValueError):
        raise InvalidExpenseDataError("Members must be given by ID")

    return {
        "description": data.get("description"),
        "amount": amount,
        "paid_by": paid_by,
        "split_among": split_among,
    }


def _expense_json(expense):
    return {
        "id": expense.id,
        "description": expense.description,
        "amount": expense.amount,
        "paid_by_member_id": expense.paid_by_member_id,
        "added_by_member_id": expense.added_by_member_id,
        "splits": [
            {"member_id": s.member_id, "amount": s.amount}
            for s in expense.splits
        ],
    }


@expenses_bp.route("/g/<slug>/admin/<admin_token>/expenses", methods=["POST"])
@admin_required
def admin_add_expense(group):
    data = request.get_json(silent=True) or {}
    try:
        expense = create_expense(db.session, group.id, **_expense_fields(data))
        return jsonify(_expense_json(expense)), 201
    except InvalidExpenseDataError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        logger.exception("Failed to add expense to group %s", group.id)
        return jsonify({"error": "Failed to add expense"}), 500


@expenses_bp.route("/g/<slug>/admin/<admin_token>/expenses/<int:expense_id>", methods=["PUT"])
@admin_required
def admin_update_expense(group, expense_id):
    data = request.get_json(silent=True) or {}
    try:
        expense = update_expense(db.session, group.id, expense_id, **_expense_fields(data))
        return jsonify(_expense_json(expense))
    except ExpenseNotFoundError:
        return jsonify({"error": "Expense not found"}), 404
    except InvalidExpenseDataError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        logger.exception("Failed to update expense %s", expense_id)
        return jsonify({"error": "Failed to update expense"}), 500


@expenses_bp.route("/g/<slug>/admin/<admin_token>/expenses/<int:expense_id>", methods=["DELETE"])
@admin_required
def admin_delete_expense(group, expense_id):
    try:
        delete_expense(db.session, group.id, expense_id)
        return jsonify({"status": "deleted"})
    except ExpenseNotFoundError:
        return jsonify({"error": "Expense not found"}), 404
    except Exception:
        db.session.rollback()
        logger.exception("Failed to delete expense %s", expense_id)
        return jsonify({"error": "Failed to delete expense"}), 500


@expenses_bp.route("/g/<slug>/m/<member_token>/expenses", methods=["POST"])
@member_required
def member_add_expense(group, member):
    data = request.get_json(silent=True) or {}
    try:
        expense = create_expense(
            db.session,
            group.id,
            added_by=member.id,
            **_expense_fields(data)
        )
        return jsonify(_expense_json(expense)), 201
    except InvalidExpenseDataError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        logger.exception("Failed to add expense to group %s", group.id)
        return jsonify({"error": "Failed to add expense"}), 500
