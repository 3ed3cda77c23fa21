import logging
from sqlalchemy import select
from models import Group
from utils.helpers import generate_slug, generate_token

logger = logging.getLogger(__name__)

DEFAULT_SLUG_ATTEMPTS = 10


class GroupNotFoundError(Exception):
    """Raised when a group is not found"""
    pass


class InvalidGroupDataError(Exception):
    """Raised when group data is invalid"""
    pass


def _slug_taken(session, slug):
    return session.execute(
        select(Group.id).where(Group.slug == slug)
    ).first() is not None


def create_group(session, name, max_attempts=DEFAULT_SLUG_ATTEMPTS):
    """
    Create a group with a fresh public slug and a secret admin token.

    Args:
        session: SQLAlchemy session
        name: Group name
        max_attempts: Extra slugs to try when the first one is taken

    Returns:
        Group object

    Raises:
        InvalidGroupDataError: If the name is empty
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidGroupDataError("Please enter a group name")

    slug = generate_slug()
    attempts = 0
    while _slug_taken(session, slug) and attempts < max_attempts:
        slug = generate_slug()
        attempts += 1

    group = Group(name=name.strip(), slug=slug, admin_token=generate_token())
    session.add(group)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Created group %s (%s)", group.id, group.slug)
    return group


def get_group_by_slug(session, slug):
    """
    Get a group by its public slug.

    Args:
        session: SQLAlchemy session
        slug: Group slug from the URL

    Returns:
        Group object

    Raises:
        GroupNotFoundError: If no group has this slug
    """
    group = session.scalars(
        select(Group).where(Group.slug == slug)
    ).first()
    if not group:
        raise GroupNotFoundError(f"Group {slug} not found")
    return group


def get_group_for_admin(session, slug, admin_token):
    """
    Get a group only if the admin token matches its slug.

    Raises:
        GroupNotFoundError: If slug and token don't belong to the same group
    """
    group = session.scalars(
        select(Group).where(Group.slug == slug, Group.admin_token == admin_token)
    ).first()
    if not group:
        raise GroupNotFoundError(f"Group {slug} not found")
    return group


def rename_group(session, group, new_name):
    if not isinstance(new_name, str) or not new_name.strip():
        raise InvalidGroupDataError("Group name is required")

    group.name = new_name.strip()
    session.commit()
    return group


def delete_group(session, group):
    """Delete a group with its members, expenses and splits."""
    group_id = group.id
    try:
        session.delete(group)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("Deleted group %s", group_id)
