"""Pytest configuration and fixtures."""

import dataclasses

import pytest

from config import load_config
from database import AdminDatabase, apply_migrations
from services.audit_service import ActorContext
from web.app import create_app

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def config(tmp_path):
    """Configuration pointing at a throwaway database and upload folder."""
    return dataclasses.replace(
        load_config(),
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
        environment="testing",
        database_path=str(tmp_path / "backoffice.sqlite"),
        upload_folder=str(tmp_path / "uploads"),
        log_folder=str(tmp_path / "logs"),
        session_count=30,
        session_timezone="Asia/Ho_Chi_Minh",
    )


@pytest.fixture
def app(config):
    return create_app(config, testing=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client with an authenticated admin session."""
    response = client.post(
        "/admin/api/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def db(tmp_path):
    """Migrated store without a Flask app around it."""
    path = tmp_path / "store.sqlite"
    apply_migrations(str(path))
    return AdminDatabase(str(path))


@pytest.fixture
def app_db(app, config):
    """Store behind the ``app`` fixture."""
    return AdminDatabase(config.database_path)


@pytest.fixture
def actor():
    return ActorContext(admin_username=ADMIN_USERNAME, ip_address="127.0.0.1", user_agent="pytest")
