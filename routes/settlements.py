from flask import Blueprint, request, jsonify
from services.settlement_service import (
    ExpenseEntry,
    SplitEntry,
    InvalidSplitError,
    split_amount,
    summarize,
)

settlements_bp = Blueprint("settlements", __name__)


class InvalidSettleRequestError(Exception):
    """Raised when a settle request body is malformed"""
    pass


def _whole(value, field):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSettleRequestError(f"{field} must be a whole number")
    return value


def _parse_expense(raw):
    """
    One expense from the request body.

    Either explicit ``splits`` ([{member_id, amount}]) or ``split_among``
    (member IDs, split evenly) must be given. Amounts are in cents.
    """
    if not isinstance(raw, dict):
        raise InvalidSettleRequestError("Each expense must be an object")

    payer_id = _whole(raw.get("payer_id"), "payer_id")
    amount = _whole(raw.get("amount"), "amount")
    if amount < 0:
        raise InvalidSettleRequestError("amount must not be negative")

    if "splits" in raw:
        raw_splits = raw["splits"] or []
        if not isinstance(raw_splits, list) or not all(isinstance(s, dict) for s in raw_splits):
            raise InvalidSettleRequestError("splits must be a list of objects")
        splits = [
            SplitEntry(
                member_id=_whole(s.get("member_id"), "member_id"),
                amount=_whole(s.get("amount"), "split amount"),
            )
            for s in raw_splits
        ]
    else:
        splits = [
            SplitEntry(member_id=share.member_id, amount=share.amount)
            for share in split_amount(
                amount,
                [_whole(uid, "member_id") for uid in raw.get("split_among") or []],
            )
        ]

    if not splits:
        raise InvalidSettleRequestError("Every expense needs at least one split")
    if any(s.amount < 0 for s in splits):
        raise InvalidSettleRequestError("Split amounts must not be negative")
    if len({s.member_id for s in splits}) != len(splits):
        raise InvalidSettleRequestError("A member can only appear once per expense")
    if sum(s.amount for s in splits) != amount:
        raise InvalidSettleRequestError("Splits must add up to the expense amount")

    return ExpenseEntry(payer_id=payer_id, amount=amount, splits=splits)


def _roster(members, expenses):
    """Given members first, then anyone else in order of first appearance."""
    roster = [_whole(uid, "member_id") for uid in members]
    seen = set(roster)
    if len(seen) != len(roster):
        raise InvalidSettleRequestError("members must not repeat")

    for expense in expenses:
        for member_id in [expense.payer_id] + [s.member_id for s in expense.splits]:
            if member_id not in seen:
                seen.add(member_id)
                roster.append(member_id)
    return roster


@settlements_bp.route("/api/settle", methods=["POST"])
def api_settle():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Expected a JSON object"}), 400

    raw_expenses = data.get("expenses") or []
    raw_members = data.get("members") or []
    if not isinstance(raw_expenses, list) or not isinstance(raw_members, list):
        return jsonify({"error": "expenses and members must be lists"}), 400

    try:
        expenses = [_parse_expense(raw) for raw in raw_expenses]
        roster = _roster(raw_members, expenses)
    except (InvalidSettleRequestError, InvalidSplitError) as e:
        return jsonify({"error": str(e)}), 400

    balances, transfers = summarize(roster, expenses, strict=True)

    return jsonify({
        "balances": [
            {"member_id": b.member_id, "paid": b.paid, "owed": b.owed, "net": b.net}
            for b in balances
        ],
        "settlements": [
            {"from_member_id": t.from_member_id, "to_member_id": t.to_member_id, "amount": t.amount}
            for t in transfers
        ],
    })


@settlements_bp.route("/api/split", methods=["POST"])
def api_split():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Expected a JSON object"}), 400

    member_ids = data.get("member_ids") or []
    if not isinstance(member_ids, list):
        return jsonify({"error": "member_ids must be a list"}), 400

    try:
        shares = split_amount(
            data.get("amount"),
            [_whole(uid, "member_id") for uid in member_ids],
        )
    except (InvalidSettleRequestError, InvalidSplitError) as e:
        return jsonify({"error": str(e)}), 400

    return jsonify([
        {"member_id": share.member_id, "amount": share.amount}
        for share in shares
    ])
