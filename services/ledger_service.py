"""
Ledger Service - Reads a group's ledger and runs the settlement engine

All reads for one computation happen in the caller's session, so the roster
and the totals come from the same snapshot.
"""
from collections import namedtuple
from sqlalchemy import func, select
from models import Expense, ExpenseSplit, Member
from services.settlement_service import net_balances_from_totals, settle


MemberTotals = namedtuple("MemberTotals", ["member_id", "name", "total_paid", "total_owed"])


def get_member_totals(session, group_id):
    """
    Total paid and total owed per member, in roster order.

    Members without expenses are included with zero totals.

    Args:
        session: SQLAlchemy session
        group_id: Group ID

    Returns:
        List of MemberTotals
    """
    paid = (
        select(
            Expense.paid_by_member_id.label("member_id"),
            func.sum(Expense.amount).label("total_paid"),
        )
        .where(Expense.group_id == group_id)
        .group_by(Expense.paid_by_member_id)
        .subquery()
    )

    owed = (
        select(
            ExpenseSplit.member_id.label("member_id"),
            func.sum(ExpenseSplit.amount).label("total_owed"),
        )
        .join(Expense, Expense.id == ExpenseSplit.expense_id)
        .where(Expense.group_id == group_id)
        .group_by(ExpenseSplit.member_id)
        .subquery()
    )

    rows = session.execute(
        select(
            Member.id,
            Member.name,
            func.coalesce(paid.c.total_paid, 0),
            func.coalesce(owed.c.total_owed, 0),
        )
        .outerjoin(paid, paid.c.member_id == Member.id)
        .outerjoin(owed, owed.c.member_id == Member.id)
        .where(Member.group_id == group_id)
        .order_by(Member.created_at, Member.id)
    ).all()

    return [
        MemberTotals(member_id, name, int(total_paid), int(total_owed))
        for member_id, name, total_paid, total_owed in rows
    ]


def get_group_balances(session, group_id, strict=False):
    """
    Net balances and suggested settlements for a group.

    Args:
        session: SQLAlchemy session
        group_id: Group ID
        strict: Raise BalanceIntegrityError if nets don't sum to zero

    Returns:
        Dict with keys:
            balances: [{member_id, name, paid, owed, net}] in roster order
            settlements: [{from_member_id, from_name, to_member_id, to_name, amount}]
    """
    totals = get_member_totals(session, group_id)
    names = {t.member_id: t.name for t in totals}

    balances = net_balances_from_totals(
        (t.member_id, t.total_paid, t.total_owed) for t in totals
    )
    transfers = settle(balances, strict=strict)

    return {
        "balances": [
            {
                "member_id": b.member_id,
                "name": names[b.member_id],
                "paid": b.paid,
                "owed": b.owed,
                "net": b.net,
            }
            for b in balances
        ],
        "settlements": [
            {
                "from_member_id": t.from_member_id,
                "from_name": names[t.from_member_id],
                "to_member_id": t.to_member_id,
                "to_name": names[t.to_member_id],
                "amount": t.amount,
            }
            for t in transfers
        ],
    }


def settlements_involving(settlements, member_id):
    """Only the settlements where the member pays or gets paid."""
    return [
        s for s in settlements
        if s["from_member_id"] == member_id or s["to_member_id"] == member_id
    ]
