"""
Settlement Service - Pure settlement engine

Rules:
- No Flask, no db
- Integer minor units (cents) only
- Same input -> same output, in the same order

Turns a group's expenses into per-member net balances, then reduces the
balances to a short list of "A pays B" transfers with a greedy largest-first
matching.
"""
import logging
from collections import namedtuple
from dataclasses import dataclass
from typing import Iterable, List, Sequence

logger = logging.getLogger(__name__)


class InvalidSplitError(ValueError):
    """Raised when an amount can't be split among the given members"""
    pass


class BalanceIntegrityError(Exception):
    """Raised when net balances don't sum to zero"""
    pass


@dataclass(frozen=True)
class Share:
    member_id: int
    amount: int


@dataclass(frozen=True)
class SplitEntry:
    member_id: int
    amount: int


@dataclass(frozen=True)
class ExpenseEntry:
    payer_id: int
    amount: int
    splits: Sequence[SplitEntry]


@dataclass(frozen=True)
class NetBalance:
    member_id: int
    paid: int
    owed: int

    @property
    def net(self):
        return self.paid - self.owed


@dataclass(frozen=True)
class Transfer:
    from_member_id: int
    to_member_id: int
    amount: int


SettlementSummary = namedtuple("SettlementSummary", ["balances", "transfers"])


def split_amount(total: int, member_ids: Sequence[int]) -> List[Share]:
    """
    Split a total evenly among members.

    Every member gets ``total // n``; the first ``total % n`` members in
    input order get one extra unit.

    Args:
        total: Amount in minor units (>= 0)
        member_ids: Ordered member IDs, no duplicates

    Returns:
        List of Share in input order, summing exactly to total

    Raises:
        InvalidSplitError: If total is not a non-negative int or
                           member_ids is empty or has duplicates
    """
    if isinstance(total, bool) or not isinstance(total, int):
        raise InvalidSplitError("Total must be an integer number of minor units")
    if total < 0:
        raise InvalidSplitError("Total must not be negative")

    member_ids = list(member_ids)
    if not member_ids:
        raise InvalidSplitError("Cannot split among zero members")
    if len(set(member_ids)) != len(member_ids):
        raise InvalidSplitError("Members must not repeat")

    base, remainder = divmod(total, len(member_ids))
    return [
        Share(member_id=member_id, amount=base + (1 if i < remainder else 0))
        for i, member_id in enumerate(member_ids)
    ]


def compute_net_balances(roster: Sequence[int], expenses: Iterable[ExpenseEntry]) -> List[NetBalance]:
    """
    Compute paid/owed/net for every member of the roster.

    Members with no expenses still appear, with net 0.

    Args:
        roster: Ordered member IDs of the group
        expenses: ExpenseEntry records referencing roster members

    Returns:
        List of NetBalance in roster order
    """
    paid = {member_id: 0 for member_id in roster}
    owed = {member_id: 0 for member_id in roster}

    for expense in expenses:
        paid[expense.payer_id] += expense.amount
        for split in expense.splits:
            owed[split.member_id] += split.amount

    return [
        NetBalance(member_id=member_id, paid=paid[member_id], owed=owed[member_id])
        for member_id in roster
    ]


def net_balances_from_totals(totals) -> List[NetBalance]:
    """Build balances from (member_id, total_paid, total_owed) rows, keeping row order."""
    return [
        NetBalance(member_id=member_id, paid=int(total_paid or 0), owed=int(total_owed or 0))
        for member_id, total_paid, total_owed in totals
    ]


def balance_integrity_ok(balances: Iterable[NetBalance]) -> bool:
    """
    Check that balances sum to zero.

    Every cent paid must be allocated to exactly one member's share.

    Args:
        balances: NetBalance records of one group

    Returns:
        bool: True if balances are balanced
    """
    return sum(b.net for b in balances) == 0


def settle(balances: Sequence[NetBalance], strict: bool = False) -> List[Transfer]:
    """
    Reduce net balances to a list of transfers.

    Greedy matching: debtors and creditors are each sorted by remaining
    amount (largest first, ties by position in ``balances``); each debtor
    pays creditors in that order until their debt is gone.

    The result zeroes every balance, has only positive amounts and at most
    ``debtors + creditors - 1`` transfers. It is not always the smallest
    possible number of transfers.

    Args:
        balances: NetBalance records in roster order
        strict: Raise when balances don't sum to zero instead of logging

    Returns:
        List of Transfer in emission order

    Raises:
        BalanceIntegrityError: If strict and balances don't sum to zero
    """
    if not balance_integrity_ok(balances):
        total = sum(b.net for b in balances)
        if strict:
            raise BalanceIntegrityError(f"Net balances sum to {total}, expected 0")
        logger.error("Net balances sum to %s, settling best-effort", total)

    debtors = []    # [position, member_id, remaining]
    creditors = []
    for position, balance in enumerate(balances):
        if balance.net < 0:
            debtors.append([position, balance.member_id, -balance.net])
        elif balance.net > 0:
            creditors.append([position, balance.member_id, balance.net])

    # Largest first; equal amounts keep roster order
    debtors.sort(key=lambda x: (-x[2], x[0]))
    creditors.sort(key=lambda x: (-x[2], x[0]))

    transfers = []
    for debtor in debtors:
        for creditor in creditors:
            if debtor[2] <= 0:
                break
            if creditor[2] <= 0:
                continue

            amount = min(debtor[2], creditor[2])
            if amount > 0:
                transfers.append(Transfer(
                    from_member_id=debtor[1],
                    to_member_id=creditor[1],
                    amount=amount,
                ))
                debtor[2] -= amount
                creditor[2] -= amount

    return transfers


def summarize(roster: Sequence[int], expenses: Iterable[ExpenseEntry], strict: bool = False) -> SettlementSummary:
    """Net balances and settlement transfers for one group."""
    balances = compute_net_balances(roster, expenses)
    return SettlementSummary(balances=balances, transfers=settle(balances, strict=strict))
