# tests/conftest.py
import pytest

from datapresenter import create_app
from datapresenter.config import TestingConfig
from datapresenter.models import Series, db

PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="function")
def app(tmp_path):
    """A fresh app per test on an in-memory database."""

    class Config(TestingConfig):
        FRONTEND_FOLDER = str(tmp_path)

    application = create_app(Config)
    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture(scope="function")
def runner(app):
    return app.test_cli_runner()


def register(client, username="tester", email="tester@example.com", password=PASSWORD):
    return client.post("/api/auth/register", json={
        "username": username,
        "email": email,
        "password": password,
    })


@pytest.fixture(scope="function")
def token(client):
    response = register(client)
    assert response.status_code == 201
    return response.get_json()["token"]


@pytest.fixture(scope="function")
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def series_id(app):
    """A temperature series bounded to [-10, 50]."""
    with app.app_context():
        series = Series(name="Room temperature", min_value=-10, max_value=50,
                        unit="°C", color="#EF4444")
        db.session.add(series)
        db.session.commit()
        return series.id


@pytest.fixture(scope="function")
def sensor(client, auth_headers, series_id):
    """A sensor created through the API; carries the unmasked key."""
    response = client.post("/api/sensors", headers=auth_headers, json={
        "name": "Living room DHT22",
        "seriesId": series_id,
    })
    assert response.status_code == 201
    return response.get_json()
