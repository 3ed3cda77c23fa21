"""Shared fixtures: a fresh in-memory app per test."""

import pytest

from app import create_app
from config import TestConfig
from models import db
from services.group_service import create_group
from services.member_service import add_member


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    with app.app_context():
        yield db.session


@pytest.fixture
def group(session):
    return create_group(session, "Ski trip")


@pytest.fixture
def members(session, group):
    """Alice, Bob, Carol and Dave, in that roster order."""
    return [add_member(session, group.id, name) for name in ("Alice", "Bob", "Carol", "Dave")]


@pytest.fixture
def api_group(client):
    """A group created through the API, with four members."""
    created = client.post("/api/groups", json={"name": "Flat 4B"}).get_json()
    admin_url = created["admin_url"]
    members = [
        client.post(f"{admin_url}/members", json={"name": name}).get_json()
        for name in ("Alice", "Bob", "Carol", "Dave")
    ]
    return {"admin_url": admin_url, "slug": created["slug"], "members": members}
