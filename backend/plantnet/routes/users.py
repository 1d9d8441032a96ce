from collections import defaultdict
from datetime import datetime
from typing import Dict

from flask import Blueprint, jsonify, request
from flask_jwt_extended import set_access_cookies, unset_access_cookies

from ..context import get_context
from ..documents import (
    created_at_of,
    json_object,
    normalize_email,
    safe_float,
    to_json,
    update_result,
)
from ..errors import BadRequest, NotFound
from ..guards import current_email, guarded, require_admin, require_session
from ..tokens import issue_token

users_bp = Blueprint("users", __name__)

ALLOWED_USER_ROLES = {"customer", "seller", "admin"}
DEFAULT_USER_ROLE = "customer"

# Fields a client may not set when signing in.
PROTECTED_USER_FIELDS = {"_id", "role", "status", "created_at", "last_login"}


# --- Session ---

@users_bp.post("/jwt")
def create_session_token():
    payload = json_object(request.get_json(silent=True))
    token = issue_token(payload)

    response = jsonify({"success": True})
    set_access_cookies(response, token)
    return response


@users_bp.get("/logout")
def logout():
    response = jsonify({"success": True})
    unset_access_cookies(response)
    return response


# --- Users ---

@users_bp.post("/users")
def save_user():
    payload = json_object(request.get_json(silent=True))
    email = normalize_email(payload.get("email"))
    if not email:
        raise BadRequest("email is required")

    now = datetime.utcnow()
    profile = {
        key: value
        for key, value in payload.items()
        if key not in PROTECTED_USER_FIELDS
    }
    profile["email"] = email

    result = get_context().users.update_one(
        {"email": email},
        {
            "$set": {"last_login": now},
            "$setOnInsert": {
                **profile,
                "role": DEFAULT_USER_ROLE,
                "created_at": now,
            },
        },
        upsert=True,
    )
    return jsonify(update_result(result))


@users_bp.get("/user/role/<email>")
def get_user_role(email: str):
    user = get_context().users.find_one(
        {"email": normalize_email(email)}, {"role": 1}
    )
    return jsonify({"role": user.get("role") if user else None})


@users_bp.get("/allUsers")
@guarded(require_session, require_admin)
def list_users():
    users = get_context().users.find({"email": {"$ne": current_email()}})
    return jsonify(to_json(list(users)))


@users_bp.patch("/update/user/role/<email>")
@guarded(require_session, require_admin)
def update_user_role(email: str):
    payload = json_object(request.get_json(silent=True))
    desired_role = str(payload.get("role", "")).strip().lower()
    if desired_role not in ALLOWED_USER_ROLES:
        raise BadRequest("Role must be 'customer', 'seller', or 'admin'.")

    result = get_context().users.update_one(
        {"email": normalize_email(email)},
        {"$set": {"role": desired_role, "status": "verified"}},
    )
    if result.matched_count == 0:
        raise NotFound("User not found.")
    return jsonify(update_result(result))


@users_bp.patch("/become/seller/<email>")
def request_seller_role(email: str):
    result = get_context().users.update_one(
        {"email": normalize_email(email)},
        {"$set": {"status": "requested"}},
    )
    if result.matched_count == 0:
        raise NotFound("User not found.")
    return jsonify(update_result(result))


# --- Statistics ---

def summarize_orders(order_documents) -> Dict[str, object]:
    """Totals and a per-day chart, all priced the same way."""
    total_orders = 0
    total_revenue = 0.0
    days: Dict[str, Dict[str, float]] = defaultdict(
        lambda: {"quantity": 0, "price": 0.0, "order": 0}
    )
    for document in order_documents:
        price = safe_float(document.get("price"), 0.0)
        total_orders += 1
        total_revenue += price

        created_at = created_at_of(document)
        if not created_at:
            continue
        bucket = days[created_at.strftime("%Y-%m-%d")]
        bucket["quantity"] += int(safe_float(document.get("quantity"), 0))
        bucket["price"] += price
        bucket["order"] += 1

    return {
        "totalOrders": total_orders,
        "totalRevenue": round(total_revenue, 2),
        "chartData": [
            {
                "date": day,
                "quantity": values["quantity"],
                "price": round(values["price"], 2),
                "order": values["order"],
            }
            for day, values in sorted(days.items())
        ],
    }


@users_bp.get("/admin/statistic")
@guarded(require_session)
def admin_statistic():
    context = get_context()
    order_documents = context.orders.find(
        {}, {"created_at": 1, "price": 1, "quantity": 1}
    )

    return jsonify(
        {
            "totalUsers": context.users.count_documents({}),
            "totalPlants": context.plants.count_documents({}),
            **summarize_orders(order_documents),
        }
    )
