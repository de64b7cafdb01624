"""
Shared fixtures for API integration tests.

Each test gets a fresh SQLite file and an app whose lifespan has run,
plus tokens for a regular user and an admin.
"""

import os
import tempfile

import pytest
from fastapi.testclient import TestClient

from vidly_server.api import create_app
from vidly_server.config import Settings


@pytest.fixture
def data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def settings(data_dir):
    return Settings(
        database_path=os.path.join(data_dir, "vidly.db"),
        jwt_private_key="integration-signing-key-0123456789",
        bcrypt_rounds=4,
    )


@pytest.fixture
def client(settings):
    """Test client with the app lifespan running."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def db(client):
    return client.app.state.database


def _issue_for(client, db, name, email, is_admin):
    with db.transaction() as uow:
        user = uow.users.create(name, email, "not-a-real-hash", is_admin=is_admin)
    return client.app.state.token_service.issue(user)


@pytest.fixture
def user_token(client, db):
    return _issue_for(client, db, "Regular User", "user@mail.com", is_admin=False)


@pytest.fixture
def admin_token(client, db):
    return _issue_for(client, db, "Admin User", "admin@mail.com", is_admin=True)


@pytest.fixture
def auth(user_token):
    """Headers for a regular user."""
    return {"x-auth-token": user_token}


@pytest.fixture
def admin_auth(admin_token):
    """Headers for an admin."""
    return {"x-auth-token": admin_token}


@pytest.fixture
def seed(db):
    """Factory helpers for catalog and customer rows."""

    class Seeder:
        def genre(self, name="Comedy"):
            with db.transaction() as uow:
                return uow.genres.create(name)

        def movie(self, title="Airplane!", stock=3, rate=2.0, genre=None):
            genre = genre or self.genre()
            with db.transaction() as uow:
                return uow.movies.create(title, genre, number_in_stock=stock, daily_rental_rate=rate)

        def customer(self, name="Jane Doe", phone="555-0100", is_gold=False):
            with db.transaction() as uow:
                return uow.customers.create(name, phone, is_gold=is_gold)

    return Seeder()
