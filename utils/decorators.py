from functools import wraps
from flask import jsonify
from models import db
from services.group_service import get_group_for_admin, get_group_by_slug, GroupNotFoundError
from services.member_service import get_member_by_token, MemberNotFoundError


def _not_found():
    return jsonify({"error": "Not found"}), 404


def admin_required(view):
    """Resolve ``slug`` + ``admin_token`` from the URL into ``group``."""
    @wraps(view)
    def wrapper(slug, admin_token, *args, **kwargs):
        try:
            group = get_group_for_admin(db.session, slug, admin_token)
        except GroupNotFoundError:
            return _not_found()
        return view(group, *args, **kwargs)
    return wrapper


def member_required(view):
    """Resolve ``slug`` + ``member_token`` from the URL into ``group`` and ``member``."""
    @wraps(view)
    def wrapper(slug, member_token, *args, **kwargs):
        try:
            group = get_group_by_slug(db.session, slug)
            member = get_member_by_token(db.session, group.id, member_token)
        except (GroupNotFoundError, MemberNotFoundError):
            return _not_found()
        return view(group, member, *args, **kwargs)
    return wrapper
