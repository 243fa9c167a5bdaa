import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import pytest
from community_hub import create_app
from community_hub.extensions import db, limiter
from community_hub.models import User
from community_hub.services import communities

@pytest.fixture(scope="session")
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "WTF_CSRF_ENABLED": False,
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()

@pytest.fixture()
def client(app):
    return app.test_client()

@pytest.fixture()
def runner(app):
    return app.test_cli_runner()

def _wipe(app):
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    # Rate-limit counters are keyed by user id, and ids restart after the wipe
    limiter.reset()

@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    _wipe(app)
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    _wipe(app)


# ---- builders shared by the suites (return ids so callers never hold detached rows) ----

def make_user(email: str) -> int:
    u = User(email=email)
    db.session.add(u)
    db.session.commit()
    return u.id

def make_community(name: str = "Riverside Commons", organizer_email: str = "organizer@example.com"):
    """Returns (community_id, organizer_id)."""
    organizer_id = make_user(organizer_email)
    c = communities.create_community(name, organizer_id)
    return c.id, organizer_id
