from datetime import timedelta

import pytest
from flask import Flask, g

from plantnet.guards import RoleGate, guarded, require_admin, require_seller
from plantnet.tokens import issue_token


GATED_ROUTES = [
    ("get", "/allUsers"),
    ("patch", "/update/user/role/someone@x.com"),
    ("get", "/admin/statistic"),
    ("post", "/plants"),
    ("get", "/all/orders/customer/someone@x.com"),
    ("get", "/all/orders/seller/someone@x.com"),
]


@pytest.mark.parametrize("method,path", GATED_ROUTES)
def test_gated_routes_require_a_session_cookie(client, method, path):
    response = getattr(client, method)(path, json={})

    assert response.status_code == 401
    assert response.get_json() == {"message": "unauthorized access"}


def test_authorization_header_is_not_accepted(app, client, add_user):
    add_user("admin@x.com", role="admin")
    with app.app_context():
        token = issue_token({"email": "admin@x.com"})

    response = client.get("/allUsers", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_expired_token_gets_401(app, client, add_user):
    add_user("admin@x.com", role="admin")
    with app.app_context():
        token = issue_token({"email": "admin@x.com"}, expires_delta=timedelta(seconds=-5))
    client.set_cookie("token", token)

    response = client.get("/allUsers")

    assert response.status_code == 401


def test_garbage_cookie_gets_401(client):
    client.set_cookie("token", "not.a.token")

    assert client.get("/admin/statistic").status_code == 401


def test_non_admin_is_forbidden_from_admin_routes(client, add_user, sign_in):
    add_user("seller@x.com", role="seller")
    sign_in("seller@x.com")

    response = client.get("/allUsers")

    assert response.status_code == 403


def test_unknown_user_is_forbidden(client, sign_in):
    sign_in("ghost@x.com")

    assert client.get("/allUsers").status_code == 403


def test_customer_is_forbidden_from_seller_routes(client, add_user, sign_in):
    add_user("buyer@x.com")
    sign_in("buyer@x.com")

    response = client.post("/plants", json={"name": "Fern", "price": 4, "quantity": 1})

    assert response.status_code == 403


def test_role_is_read_from_storage_on_every_request(client, database, add_user, sign_in):
    add_user("admin@x.com", role="admin")
    sign_in("admin@x.com")
    assert client.get("/allUsers").status_code == 200

    database.users.update_one({"email": "admin@x.com"}, {"$set": {"role": "customer"}})

    assert client.get("/allUsers").status_code == 403


def test_authenticated_route_needs_no_role(client, sign_in):
    sign_in("anyone@x.com")

    assert client.get("/admin/statistic").status_code == 200


def test_role_gates_share_one_implementation():
    assert isinstance(require_admin, RoleGate)
    assert isinstance(require_seller, RoleGate)
    assert require_admin.required_role == "admin"
    assert require_seller.required_role == "seller"


def test_guarded_stops_at_first_short_circuit():
    app = Flask(__name__)
    calls = []

    def first():
        calls.append("first")
        return None

    def blocker():
        calls.append("blocker")
        return {"message": "stop"}, 418

    def never():
        calls.append("never")
        return None

    @app.get("/chain")
    @guarded(first, blocker, never)
    def view():
        calls.append("view")
        return "ok"

    response = app.test_client().get("/chain")

    assert response.status_code == 418
    assert calls == ["first", "blocker"]


def test_guarded_runs_view_when_all_interceptors_pass():
    app = Flask(__name__)

    def mark():
        g.marked = True
        return None

    @app.get("/chain")
    @guarded(mark)
    def view():
        return {"marked": g.get("marked", False)}

    assert app.test_client().get("/chain").get_json() == {"marked": True}
