"""
Pytest fixtures for donphone backend tests.

Provides the application (in-memory SQLite), a clean database per test and
the Flask test client.
"""

import pytest

from donphone import create_app
from donphone.extensions import db
from donphone.models import Document


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'ANTHROPIC_API_KEY': None,
    'BACKUP_BATCH_SIZE': 500,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every collection before each test."""
    db.session.rollback()
    db.session.query(Document).delete()
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def config_override(app):
    """Temporarily change app.config keys; restored after the test."""
    saved = {}

    def apply(**values):
        for key, value in values.items():
            saved.setdefault(key, app.config.get(key))
            app.config[key] = value

    yield apply

    app.config.update(saved)
