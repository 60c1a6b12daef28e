import pytest
from werkzeug.security import generate_password_hash

from cashflow_tracker.models import User, db
from cashflow_tracker.service import CashFlowService
from cashflow_tracker.webapp import create_app


@pytest.fixture
def app(tmp_path):
    app = create_app(
        overrides={
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
        }
    )
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return CashFlowService()


def _add_user(username: str) -> int:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=generate_password_hash("secret"),
    )
    db.session.add(user)
    db.session.commit()
    return user.id


@pytest.fixture
def alice(app):
    return _add_user("alice")


@pytest.fixture
def bob(app):
    return _add_user("bob")


@pytest.fixture
def logged_in(client, alice):
    client.post("/login", data={"username": "alice", "password": "secret"})
    return client
