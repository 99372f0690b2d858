"""Shared fixtures — each test gets a fresh app on an in-memory SQLite database."""

import pytest
from sqlalchemy import func, select

from provisioning import create_app, database
from provisioning.config import Config
from provisioning.models import Client, UserCredential


class InMemoryConfig(Config):
    TESTING = True
    DATABASE_URL = "sqlite://"
    PASSWORD_HASHING = False
    CLIENT_CREATION_STATUS = "CREATION_SUCCESS"
    MAX_USERNAME_LENGTH = 64


class HashingConfig(InMemoryConfig):
    PASSWORD_HASHING = True


@pytest.fixture
def app():
    app = create_app(InMemoryConfig)
    yield app
    database.dispose_engine()


@pytest.fixture
def hashing_app():
    app = create_app(HashingConfig)
    yield app
    database.dispose_engine()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def hashing_client(hashing_app):
    return hashing_app.test_client()


def count_users(username=None):
    query = select(func.count()).select_from(UserCredential)
    if username is not None:
        query = query.where(func.lower(UserCredential.username) == username.lower())
    with database.SessionLocal() as session:
        return session.execute(query).scalar_one()


def count_clients():
    with database.SessionLocal() as session:
        return session.execute(select(func.count()).select_from(Client)).scalar_one()
