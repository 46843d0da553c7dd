import os
from datetime import date, time

import pytest

from shift_api import create_app
from shift_api.extensions import db
from shift_api.models.employee import Employee
from shift_api.models.shift import Shift
from shift_api.models.user import User


@pytest.fixture(scope="function")
def app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app()
    app.config["TESTING"] = True
    with app.app_context():
        db.create_all()
        admin = User(username="admin", role="admin")
        admin.set_password("admin123")
        clerk = User(username="clerk", role="user")
        clerk.set_password("clerk123")
        db.session.add_all([admin, clerk]); db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


def _login(client, username, password):
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.get_json()
    return {"Authorization": f"Bearer {r.get_json()['data']['access']}"}


@pytest.fixture
def admin_headers(client):
    return _login(client, "admin", "admin123")


@pytest.fixture
def user_headers(client):
    return _login(client, "clerk", "clerk123")


@pytest.fixture
def make_shift(app):
    def _make(name="Morning", max_employees=None, on=date(2026, 10, 20)):
        s = Shift(name=name, date=on, start_time=time(9, 0), end_time=time(17, 0),
                  max_employees=max_employees)
        db.session.add(s); db.session.commit()
        return s
    return _make


@pytest.fixture
def make_employee(app):
    counter = {"n": 0}

    def _make(name=None, department="Ops"):
        counter["n"] += 1
        n = counter["n"]
        e = Employee(employee_code=f"E{n:03d}", name=name or f"Employee {n}",
                     email=f"e{n}@test.local", department=department)
        db.session.add(e); db.session.commit()
        return e
    return _make
