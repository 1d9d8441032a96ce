from datetime import timedelta

import mongomock
import pytest

from plantnet import create_app
from plantnet.config import Settings


class RecordingPayments:
    def __init__(self):
        self.amounts = []

    def create_intent(self, amount: int) -> str:
        self.amounts.append(amount)
        return f"pi_test_{len(self.amounts)}_secret_abc"


@pytest.fixture
def settings():
    return Settings(
        token_secret="test-secret",
        token_lifetime=timedelta(days=365),
        trusted_proxy_hops=0,
    )


@pytest.fixture
def database():
    return mongomock.MongoClient()["plantsDB"]


@pytest.fixture
def payments():
    return RecordingPayments()


@pytest.fixture
def app(settings, database, payments):
    app = create_app(settings=settings, database=database, payments=payments)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def add_user(database):
    def _add_user(email, role="customer", **fields):
        database.users.insert_one({"email": email, "role": role, **fields})
        return email

    return _add_user


@pytest.fixture
def sign_in(client):
    def _sign_in(email):
        response = client.post("/jwt", json={"email": email})
        assert response.status_code == 200
        return response

    return _sign_in
