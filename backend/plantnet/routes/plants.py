import math
from datetime import datetime

from flask import Blueprint, g, jsonify, request

from ..context import get_context
from ..documents import (
    insert_result,
    json_object,
    parse_object_id,
    to_json,
    update_result,
)
from ..errors import BadRequest, NotFound
from ..guards import guarded, require_seller, require_session

plants_bp = Blueprint("plants", __name__)

SELLER_PROFILE_FIELDS = ("email", "name", "image")


def parse_whole_number(value, field: str) -> int:
    if isinstance(value, bool):
        raise BadRequest(f"{field} must be a whole number.")
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{field} must be a whole number.")
    if not numeric.is_integer():
        raise BadRequest(f"{field} must be a whole number.")
    return int(numeric)


@plants_bp.post("/plants")
@guarded(require_session, require_seller)
def create_plant():
    payload = json_object(request.get_json(silent=True))
    plant = {key: value for key, value in payload.items() if key != "_id"}

    name = str(plant.get("name", "")).strip()
    if not name:
        raise BadRequest("A plant name is required.")

    try:
        price = round(float(plant.get("price")), 2)
    except (TypeError, ValueError):
        raise BadRequest("Price must be a valid number.")
    if not math.isfinite(price):
        raise BadRequest("Price must be a valid number.")
    if price < 0:
        raise BadRequest("Price cannot be negative.")

    quantity = parse_whole_number(plant.get("quantity", 0), "quantity")
    if quantity < 0:
        raise BadRequest("Quantity cannot be negative.")

    seller = plant.get("seller")
    if not isinstance(seller, dict):
        seller = {}
    for field in SELLER_PROFILE_FIELDS:
        if g.current_user.get(field):
            seller.setdefault(field, g.current_user[field])

    plant.update(
        {
            "name": name,
            "price": price,
            "quantity": quantity,
            "seller": seller,
            "created_at": datetime.utcnow(),
        }
    )
    result = get_context().plants.insert_one(plant)
    return jsonify(insert_result(result))


@plants_bp.get("/plants")
def list_plants():
    plants = get_context().plants.find()
    return jsonify(to_json(list(plants)))


@plants_bp.get("/plant/<plant_id>")
def get_plant(plant_id: str):
    plant = get_context().plants.find_one(
        {"_id": parse_object_id(plant_id, "plant identifier")}
    )
    return jsonify(to_json(plant))


@plants_bp.patch("/update-quatity/<plant_id>")
def update_plant_quantity(plant_id: str):
    object_id = parse_object_id(plant_id, "plant identifier")
    payload = json_object(request.get_json(silent=True))
    updated_quantity = parse_whole_number(
        payload.get("updatedQuantity"), "updatedQuantity"
    )
    change = -updated_quantity if payload.get("status") == "decrease" else updated_quantity

    result = get_context().plants.update_one(
        {"_id": object_id}, {"$inc": {"quantity": change}}
    )
    if result.matched_count == 0:
        raise NotFound("no plant found")
    return jsonify(update_result(result))
