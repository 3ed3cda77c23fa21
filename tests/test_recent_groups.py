"""Tests for the recently visited groups cookie."""

import json
from urllib.parse import quote

from utils.recent_groups import add_recent_group, parse_recent_groups, remove_recent_group


def group(n):
    return {"name": f"Group {n}", "url": f"/g/slug{n}/admin/t{n}", "role": "admin"}


def test_parse_missing_or_malformed_cookie() -> None:
    assert parse_recent_groups(None) == []
    assert parse_recent_groups("not json") == []
    assert parse_recent_groups(quote(json.dumps({"url": "/x"}))) == []


def test_parse_round_trips_encoded_list() -> None:
    raw = quote(json.dumps([group(1), {"name": "no url"}]))

    assert parse_recent_groups(raw) == [group(1)]


def test_add_moves_existing_group_to_front() -> None:
    groups = add_recent_group([group(1), group(2)], group(2))

    assert [g["url"] for g in groups] == [group(2)["url"], group(1)["url"]]


def test_add_caps_the_list() -> None:
    groups = []
    for n in range(15):
        groups = add_recent_group(groups, group(n), limit=10)

    assert len(groups) == 10
    assert groups[0] == group(14)


def test_remove_by_url() -> None:
    assert remove_recent_group([group(1), group(2)], group(1)["url"]) == [group(2)]
