"""Tests for group and member services."""

import pytest

from models import Expense, ExpenseSplit, Member
from services import group_service
from services.expense_service import create_expense
from services.group_service import (
    GroupNotFoundError,
    InvalidGroupDataError,
    create_group,
    delete_group,
    get_group_by_slug,
    get_group_for_admin,
    rename_group,
)
from services.member_service import (
    InvalidMemberDataError,
    MemberNotFoundError,
    add_member,
    get_group_members,
    get_member_by_token,
)


def test_create_group_strips_name_and_issues_links(session) -> None:
    group = create_group(session, "  Ski trip ")

    assert group.name == "Ski trip"
    assert group.slug
    assert len(group.admin_token) == 36
    assert group.admin_path == f"/g/{group.slug}/admin/{group.admin_token}"


@pytest.mark.parametrize("name", [None, "", "   ", 42])
def test_create_group_requires_name(session, name) -> None:
    with pytest.raises(InvalidGroupDataError, match="Please enter a group name"):
        create_group(session, name)


def test_create_group_retries_taken_slug(session, monkeypatch) -> None:
    slugs = iter(["taken_red_fox", "taken_red_fox", "free_blue_owl"])
    monkeypatch.setattr(group_service, "generate_slug", lambda: next(slugs))

    first = create_group(session, "One")
    second = create_group(session, "Two")

    assert first.slug == "taken_red_fox"
    assert second.slug == "free_blue_owl"


def test_admin_lookup_needs_matching_token(session, group) -> None:
    assert get_group_for_admin(session, group.slug, group.admin_token) is group

    with pytest.raises(GroupNotFoundError):
        get_group_for_admin(session, group.slug, "wrong-token")
    with pytest.raises(GroupNotFoundError):
        get_group_by_slug(session, "no_such_slug")


def test_rename_group(session, group) -> None:
    rename_group(session, group, " Beach trip ")

    assert get_group_by_slug(session, group.slug).name == "Beach trip"
    with pytest.raises(InvalidGroupDataError, match="Group name is required"):
        rename_group(session, group, " ")
    with pytest.raises(InvalidGroupDataError, match="Group name is required"):
        rename_group(session, group, 7)


def test_members_are_listed_in_roster_order(session, group, members) -> None:
    assert [m.name for m in get_group_members(session, group.id)] == ["Alice", "Bob", "Carol", "Dave"]


@pytest.mark.parametrize("name", ["  ", None, 3, ["Alice"]])
def test_member_requires_name(session, group, name) -> None:
    with pytest.raises(InvalidMemberDataError, match="Member name is required"):
        add_member(session, group.id, name)


def test_member_token_is_scoped_to_group(session, group, members) -> None:
    other = create_group(session, "Other")

    assert get_member_by_token(session, group.id, members[0].token) is members[0]
    with pytest.raises(MemberNotFoundError):
        get_member_by_token(session, other.id, members[0].token)


def test_delete_group_cascades(session, group, members) -> None:
    alice, bob = members[0], members[1]
    create_expense(session, group.id, alice.id, "Dinner", 1000, [alice.id, bob.id])

    delete_group(session, group)

    assert session.query(Member).count() == 0
    assert session.query(Expense).count() == 0
    assert session.query(ExpenseSplit).count() == 0
