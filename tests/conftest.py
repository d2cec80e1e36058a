"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Generator

import pytest
from flask import Flask
from flask_login import FlaskLoginClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bruinlease.app import create_app
from bruinlease.config import TestingConfig
from bruinlease.data_access import listings_dao, seed, users_dao
from bruinlease.data_access.db import init_db


class _TestConfig(TestingConfig):
    DATABASE_URL: str = ""


@pytest.fixture()
def app(tmp_path: Path) -> Generator[Flask, None, None]:
    """Configure a Flask application for testing with a temp SQLite database."""

    db_path = tmp_path / "test.db"
    _TestConfig.DATABASE_URL = f"sqlite:///{db_path}"
    application = create_app(_TestConfig)
    application.test_client_class = FlaskLoginClient
    with application.app_context():
        init_db(application)
        seed.seed()
    yield application


@pytest.fixture()
def client(app: Flask):
    """Anonymous Flask test client."""

    return app.test_client()


@pytest.fixture()
def login(app: Flask):
    """Return a factory building a test client signed in as the given user."""

    def _login(user):
        return app.test_client(user=user)

    return _login


@pytest.fixture()
def runner(app: Flask):
    """Flask CLI runner."""

    return app.test_cli_runner()


@pytest.fixture()
def owner(app: Flask):
    with app.app_context():
        return users_dao.get_user_by_email("olivia@ucla.edu")


@pytest.fixture()
def bella(app: Flask):
    with app.app_context():
        return users_dao.get_user_by_email("bella@ucla.edu")


@pytest.fixture()
def carlos(app: Flask):
    with app.app_context():
        return users_dao.get_user_by_email("carlos@ucla.edu")


@pytest.fixture()
def dana(app: Flask):
    with app.app_context():
        return users_dao.get_user_by_email("dana@ucla.edu")


@pytest.fixture()
def fresh_listing(app: Flask, owner):
    """A listing owned by ``owner`` with no reviews."""

    with app.app_context():
        return listings_dao.create_listing(
            owner_id=owner.user_id,
            title="Fresh Landfair Loft",
            description="Loft apartment near the north end of campus.",
            price=2100.0,
            address="600 Landfair Ave, Los Angeles, CA",
            zip_code="90024",
            bedrooms=1,
            distance_from_campus=0.3,
            lease_duration="12 months",
        )


@pytest.fixture()
def strangers(app: Flask):
    """Two users who have not exchanged any messages yet."""

    with app.app_context():
        password_hash = users_dao.hash_password("Password123!")
        first = users_dao.create_user("Drew Dweller", "drew@ucla.edu", password_hash)
        second = users_dao.create_user("Emery Tenant", "emery@ucla.edu", password_hash)
        return first, second
