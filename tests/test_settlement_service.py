"""Tests for the pure settlement engine."""

import pytest
from hypothesis import given, strategies as st

from services.settlement_service import (
    BalanceIntegrityError,
    ExpenseEntry,
    InvalidSplitError,
    NetBalance,
    SplitEntry,
    Transfer,
    balance_integrity_ok,
    compute_net_balances,
    net_balances_from_totals,
    settle,
    split_amount,
    summarize,
)


def even_expense(payer_id, amount, member_ids):
    return ExpenseEntry(
        payer_id=payer_id,
        amount=amount,
        splits=[SplitEntry(s.member_id, s.amount) for s in split_amount(amount, member_ids)],
    )


def nets(**values):
    return [NetBalance(member_id=name, paid=max(net, 0), owed=max(-net, 0)) for name, net in values.items()]


def apply(balances, transfers):
    after = {b.member_id: b.net for b in balances}
    for t in transfers:
        after[t.from_member_id] += t.amount
        after[t.to_member_id] -= t.amount
    return after


# --- split_amount ----------------------------------------------------------

def test_split_even_amount() -> None:
    shares = split_amount(9000, [1, 2])

    assert [s.amount for s in shares] == [4500, 4500]


def test_split_remainder_goes_to_first_members() -> None:
    shares = split_amount(100, [7, 3, 5])

    assert [(s.member_id, s.amount) for s in shares] == [(7, 34), (3, 33), (5, 33)]


def test_split_remainder_follows_input_order_not_ids() -> None:
    shares = split_amount(101, [9, 1, 5])

    assert [s.amount for s in shares] == [34, 34, 33]
    assert [s.member_id for s in shares] == [9, 1, 5]


def test_split_zero_total() -> None:
    assert [s.amount for s in split_amount(0, [1, 2, 3])] == [0, 0, 0]


def test_split_smaller_than_member_count() -> None:
    assert [s.amount for s in split_amount(2, [1, 2, 3, 4])] == [1, 1, 0, 0]


def test_split_rejects_empty_members() -> None:
    with pytest.raises(InvalidSplitError):
        split_amount(100, [])


def test_split_rejects_duplicate_members() -> None:
    with pytest.raises(InvalidSplitError):
        split_amount(100, [1, 2, 1])


@pytest.mark.parametrize("total", [-1, 10.5, "100", True, None])
def test_split_rejects_bad_totals(total) -> None:
    with pytest.raises(InvalidSplitError):
        split_amount(total, [1, 2])


def test_invalid_split_error_is_value_error() -> None:
    assert issubclass(InvalidSplitError, ValueError)


@given(
    total=st.integers(min_value=0, max_value=10**9),
    count=st.integers(min_value=1, max_value=40),
)
def test_split_is_exact_fair_and_deterministic(total, count) -> None:
    member_ids = list(range(100, 100 + count))

    shares = [s.amount for s in split_amount(total, member_ids)]

    assert sum(shares) == total
    assert max(shares) - min(shares) <= 1
    assert all(s >= 0 for s in shares)
    assert shares == [s.amount for s in split_amount(total, member_ids)]


# --- net balances ----------------------------------------------------------

def test_net_balances_include_idle_members() -> None:
    balances = compute_net_balances(["A", "B", "C"], [even_expense("A", 1000, ["A", "B"])])

    assert [(b.member_id, b.paid, b.owed, b.net) for b in balances] == [
        ("A", 1000, 500, 500),
        ("B", 0, 500, -500),
        ("C", 0, 0, 0),
    ]


def test_net_balances_from_totals_keeps_row_order() -> None:
    balances = net_balances_from_totals([(3, 500, 0), (1, 0, 500), (2, None, None)])

    assert [(b.member_id, b.net) for b in balances] == [(3, 500), (1, -500), (2, 0)]


@given(st.lists(
    st.tuples(
        st.integers(min_value=0, max_value=5),
        st.integers(min_value=1, max_value=10**7),
        st.sets(st.integers(min_value=0, max_value=5), min_size=1),
    ),
    max_size=30,
))
def test_net_balances_are_conserved(raw_expenses) -> None:
    roster = list(range(6))
    expenses = [even_expense(p, amount, sorted(among)) for p, amount, among in raw_expenses]

    balances = compute_net_balances(roster, expenses)

    assert sum(b.net for b in balances) == 0
    assert balance_integrity_ok(balances)


# --- settle ----------------------------------------------------------------

def test_scenario_one_payer_four_people() -> None:
    roster = ["A", "B", "C", "D"]
    balances, transfers = summarize(roster, [even_expense("A", 12000, roster)])

    assert [b.net for b in balances] == [9000, -3000, -3000, -3000]
    assert transfers == [
        Transfer("B", "A", 3000),
        Transfer("C", "A", 3000),
        Transfer("D", "A", 3000),
    ]


def test_scenario_tied_debtors_follow_roster_order() -> None:
    transfers = settle(nets(A=50, B=30, C=-40, D=-40))

    assert transfers == [
        Transfer("C", "A", 40),
        Transfer("D", "A", 10),
        Transfer("D", "B", 30),
    ]


def test_tied_creditors_follow_roster_order() -> None:
    assert settle(nets(A=40, B=40, C=-50, D=-30)) == [
        Transfer("C", "A", 40),
        Transfer("C", "B", 10),
        Transfer("D", "B", 30),
    ]
    assert settle(nets(B=40, A=40, C=-50, D=-30)) == [
        Transfer("C", "B", 40),
        Transfer("C", "A", 10),
        Transfer("D", "A", 30),
    ]


def test_largest_debtor_goes_first() -> None:
    transfers = settle(nets(A=100, B=-10, C=-90))

    assert transfers == [Transfer("C", "A", 90), Transfer("B", "A", 10)]


def test_all_settled_gives_no_transfers() -> None:
    assert settle(nets(A=0, B=0)) == []
    assert settle([]) == []


def test_settle_is_idempotent() -> None:
    balances = nets(A=700, B=-250, C=-250, D=100, E=-300)

    assert settle(balances) == settle(balances)


def test_unbalanced_input_raises_when_strict() -> None:
    with pytest.raises(BalanceIntegrityError):
        settle(nets(A=100, B=-90), strict=True)


def test_unbalanced_input_is_settled_best_effort(caplog) -> None:
    transfers = settle(nets(A=100, B=-90))

    assert transfers == [Transfer("B", "A", 90)]
    assert "sum to 10" in caplog.text


@given(st.lists(st.integers(min_value=-10**6, max_value=10**6), min_size=1, max_size=25))
def test_settlement_properties(values) -> None:
    # Close the books with one last member so the nets sum to zero
    values = values + [-sum(values)]
    balances = [NetBalance(member_id=i, paid=max(v, 0), owed=max(-v, 0)) for i, v in enumerate(values)]

    transfers = settle(balances, strict=True)

    debtors = sum(1 for v in values if v < 0)
    creditors = sum(1 for v in values if v > 0)
    assert all(v == 0 for v in apply(balances, transfers).values())
    assert all(t.amount > 0 and t.from_member_id != t.to_member_id for t in transfers)
    assert sum(t.amount for t in transfers) == sum(v for v in values if v > 0)
    assert len(transfers) <= max(debtors + creditors - 1, 0)
    assert transfers == settle(balances, strict=True)
