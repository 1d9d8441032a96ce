from datetime import datetime
from typing import Dict, List

from bson import ObjectId
from bson.errors import InvalidId
from flask import Blueprint, current_app, jsonify, request

from ..context import get_context
from ..documents import (
    insert_result,
    json_object,
    normalize_email,
    parse_object_id,
    safe_float,
    to_json,
)
from ..errors import BadRequest, NotFound
from ..guards import guarded, require_seller, require_session
from .plants import parse_whole_number

orders_bp = Blueprint("orders", __name__)

PLANT_SUMMARY_FIELDS = ("name", "image", "category")


def attach_plant_summaries(order_documents: List[Dict]) -> List[Dict]:
    plant_ids = set()
    for order in order_documents:
        try:
            plant_ids.add(ObjectId(str(order.get("plantId"))))
        except (InvalidId, TypeError):
            continue

    plants_by_id = {}
    if plant_ids:
        for plant in get_context().plants.find(
            {"_id": {"$in": list(plant_ids)}},
            {field: 1 for field in PLANT_SUMMARY_FIELDS},
        ):
            plants_by_id[str(plant["_id"])] = plant

    for order in order_documents:
        plant = plants_by_id.get(str(order.get("plantId")))
        order["plant"] = (
            {field: plant.get(field) for field in PLANT_SUMMARY_FIELDS} if plant else None
        )
    return order_documents


@orders_bp.post("/create-intent")
def create_payment_intent():
    payload = json_object(request.get_json(silent=True))
    quantity = parse_whole_number(payload.get("quantity"), "quantity")
    if quantity <= 0:
        raise BadRequest("quantity must be greater than zero.")

    context = get_context()
    plant = context.plants.find_one(
        {"_id": parse_object_id(payload.get("id"), "plant identifier")}
    )
    if not plant:
        raise NotFound("no plant found")

    # amount in cents
    amount = int(round(quantity * safe_float(plant.get("price"), 0.0) * 100))
    current_app.logger.info(
        "Creating payment intent of %s for plant %s", amount, plant["_id"]
    )
    client_secret = context.payments.create_intent(amount)
    return jsonify({"clientSecret": client_secret})


@orders_bp.post("/orders")
def create_order():
    payload = json_object(request.get_json(silent=True))
    order = {key: value for key, value in payload.items() if key != "_id"}
    customer = order.get("customer")
    if isinstance(customer, dict) and customer.get("email"):
        customer["email"] = normalize_email(customer["email"])
    if isinstance(order.get("seller"), str):
        order["seller"] = normalize_email(order["seller"])
    order.setdefault("status", "Pending")
    order["created_at"] = datetime.utcnow()

    result = get_context().orders.insert_one(order)
    return jsonify(insert_result(result))


@orders_bp.get("/all/orders/customer/<email>")
@guarded(require_session)
def list_customer_orders(email: str):
    orders = list(
        get_context().orders.find({"customer.email": normalize_email(email)})
    )
    return jsonify(to_json(attach_plant_summaries(orders)))


@orders_bp.get("/all/orders/seller/<email>")
@guarded(require_session, require_seller)
def list_seller_orders(email: str):
    orders = list(get_context().orders.find({"seller": normalize_email(email)}))
    return jsonify(to_json(attach_plant_summaries(orders)))
