"""
Member Service - Business logic for group members

Members are created by the group admin and get their own secret link.
"""
import logging
from sqlalchemy import select
from models import Member
from utils.helpers import generate_token

logger = logging.getLogger(__name__)


class MemberNotFoundError(Exception):
    """Raised when a member is not found"""
    pass


class InvalidMemberDataError(Exception):
    """Raised when member data is invalid"""
    pass


def add_member(session, group_id, name):
    """
    Add a member to a group.

    Args:
        session: SQLAlchemy session
        group_id: Group ID
        name: Display name

    Returns:
        Member object

    Raises:
        InvalidMemberDataError: If the name is empty
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidMemberDataError("Member name is required")

    member = Member(group_id=group_id, name=name.strip(), token=generate_token())
    session.add(member)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Added member %s to group %s", member.id, group_id)
    return member


def get_group_members(session, group_id):
    """
    Get all members of a group in roster order (oldest first).

    Roster order is also the tie-break order for settlements.
    """
    return session.scalars(
        select(Member)
        .where(Member.group_id == group_id)
        .order_by(Member.created_at, Member.id)
    ).all()


def get_member_by_token(session, group_id, token):
    """
    Get a member of a group by their secret token.

    Raises:
        MemberNotFoundError: If no member of this group has the token
    """
    member = session.scalars(
        select(Member).where(Member.group_id == group_id, Member.token == token)
    ).first()
    if not member:
        raise MemberNotFoundError("Member not found")
    return member


def get_member_ids(session, group_id):
    return set(session.scalars(
        select(Member.id).where(Member.group_id == group_id)
    ).all())
