"""
Recently visited groups, kept in a cookie on the visitor's browser.

The cookie holds a JSON list of {name, url, role, member_name?} dicts,
most recent first.
"""
import json
import logging
from urllib.parse import quote, unquote

from flask import current_app

logger = logging.getLogger(__name__)


def parse_recent_groups(raw):
    """Decode the cookie value; anything malformed reads as no groups."""
    if not raw:
        return []
    try:
        groups = json.loads(unquote(raw))
    except ValueError:
        logger.debug("Ignoring malformed recent groups cookie")
        return []
    if not isinstance(groups, list):
        return []
    return [g for g in groups if isinstance(g, dict) and g.get("url")]


def add_recent_group(existing, current, limit=10):
    groups = [g for g in existing if g.get("url") != current["url"]]
    groups.insert(0, current)
    return groups[:limit]


def remove_recent_group(existing, url):
    return [g for g in existing if g.get("url") != url]


def read_recent_groups(request):
    return parse_recent_groups(request.cookies.get(current_app.config["RECENT_GROUPS_COOKIE"]))


def write_recent_groups(response, groups):
    config = current_app.config
    response.set_cookie(
        config["RECENT_GROUPS_COOKIE"],
        quote(json.dumps(groups, separators=(",", ":"))),
        max_age=config["RECENT_GROUPS_MAX_AGE"],
        path="/",
        httponly=True,
        samesite="Lax",
    )
    return response


def remember_group(request, response, name, url, role, member_name=None):
    """Put the visited group at the top of the cookie list."""
    current = {"name": name, "url": url, "role": role}
    if member_name:
        current["member_name"] = member_name
    groups = add_recent_group(
        read_recent_groups(request),
        current,
        limit=current_app.config["RECENT_GROUPS_LIMIT"],
    )
    return write_recent_groups(response, groups)
