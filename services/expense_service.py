"""
Expense Service - Business logic for expense operations

Rules:
- No Flask (request, current_app, jsonify)
- No decorators
- Gets the SQLAlchemy session passed in, never the global one
- Can raise exceptions
- Returns plain Python data
"""
import logging
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from models import Expense, ExpenseSplit
from services.member_service import get_member_ids
from services.settlement_service import split_amount

logger = logging.getLogger(__name__)


class ExpenseNotFoundError(Exception):
    """Raised when an expense is not found"""
    pass


class InvalidExpenseDataError(Exception):
    """Raised when expense data is invalid"""
    pass


def _validate(session, group_id, description, amount, paid_by, split_among):
    if not isinstance(description, str) or not description.strip():
        raise InvalidExpenseDataError("Description is required")
    if amount is None:
        raise InvalidExpenseDataError("Amount is required")
    if not paid_by:
        raise InvalidExpenseDataError("Select who paid")
    if not split_among:
        raise InvalidExpenseDataError("Select at least one person to split with")
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidExpenseDataError("Amount must be a whole number of cents")
    if amount <= 0:
        raise InvalidExpenseDataError("Amount must be greater than 0")
    if len(set(split_among)) != len(split_among):
        raise InvalidExpenseDataError("Each person can only be selected once")

    member_ids = get_member_ids(session, group_id)
    if paid_by not in member_ids:
        raise InvalidExpenseDataError("Payer is not a member of this group")
    if any(member_id not in member_ids for member_id in split_among):
        raise InvalidExpenseDataError("Can only split with members of this group")


def _build_splits(amount, split_among):
    return [
        ExpenseSplit(member_id=share.member_id, amount=share.amount)
        for share in split_amount(amount, split_among)
    ]


def create_expense(session, group_id, paid_by, description, amount, split_among, added_by=None):
    """
    Create an expense with splits.

    The amount is divided evenly among ``split_among``; members earlier in
    the list absorb the leftover cents.

    Args:
        session: SQLAlchemy session
        group_id: Group ID
        paid_by: Member ID who paid
        description: What the money was spent on
        amount: Amount in cents (int)
        split_among: Ordered list of member IDs sharing the cost
        added_by: Member ID who logged it (None when the admin did)

    Returns:
        Expense object

    Raises:
        InvalidExpenseDataError: If data is invalid
    """
    split_among = list(split_among or [])
    _validate(session, group_id, description, amount, paid_by, split_among)

    expense = Expense(
        group_id=group_id,
        paid_by_member_id=paid_by,
        added_by_member_id=added_by,
        description=description.strip(),
        amount=amount,
        splits=_build_splits(amount, split_among),
    )
    session.add(expense)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Created expense %s in group %s for %s cents", expense.id, group_id, amount)
    return expense


def get_expense(session, group_id, expense_id):
    """
    Get an expense belonging to a group.

    Raises:
        ExpenseNotFoundError: If the expense doesn't exist in this group
    """
    expense = session.get(Expense, expense_id)
    if not expense or expense.group_id != group_id:
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")
    return expense


def update_expense(session, group_id, expense_id, paid_by, description, amount, split_among):
    """
    Replace an expense's fields and all of its splits.

    Raises:
        ExpenseNotFoundError: If the expense doesn't exist in this group
        InvalidExpenseDataError: If data is invalid
    """
    expense = get_expense(session, group_id, expense_id)
    split_among = list(split_among or [])
    _validate(session, group_id, description, amount, paid_by, split_among)

    try:
        expense.description = description.strip()
        expense.amount = amount
        expense.paid_by_member_id = paid_by
        # Old rows must be gone before the new ones hit the unique constraint
        expense.splits.clear()
        session.flush()
        expense.splits.extend(_build_splits(amount, split_among))
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Updated expense %s in group %s", expense.id, group_id)
    return expense


def delete_expense(session, group_id, expense_id):
    """
    Delete an expense and its splits.

    Raises:
        ExpenseNotFoundError: If the expense doesn't exist in this group
    """
    expense = get_expense(session, group_id, expense_id)
    try:
        session.delete(expense)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("Deleted expense %s in group %s", expense_id, group_id)


def get_group_expenses(session, group_id):
    """
    Get all expenses for a group, newest first, with names resolved.

    Returns:
        List of dicts with keys: id, description, amount, paid_by_member_id,
        paid_by_name, added_by_member_id, added_by_name, created_at, splits
    """
    expenses = session.scalars(
        select(Expense)
        .where(Expense.group_id == group_id)
        .options(
            selectinload(Expense.payer),
            selectinload(Expense.added_by),
            selectinload(Expense.splits).selectinload(ExpenseSplit.member),
        )
        .order_by(Expense.created_at.desc(), Expense.id.desc())
    ).all()

    return [
        {
            "id": expense.id,
            "description": expense.description,
            "amount": expense.amount,
            "paid_by_member_id": expense.paid_by_member_id,
            "paid_by_name": expense.payer.name,
            "added_by_member_id": expense.added_by_member_id,
            "added_by_name": expense.added_by.name if expense.added_by else None,
            "created_at": expense.created_at,
            "splits": [
                {
                    "member_id": split.member_id,
                    "member_name": split.member.name,
                    "amount": split.amount,
                }
                for split in expense.splits
            ],
        }
        for expense in expenses
    ]
