import math
from datetime import datetime
from typing import Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId

from .errors import BadRequest


def normalize_email(value: Optional[str]) -> str:
    return str(value or "").strip().lower()


def safe_float(value, default=0.0):
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return default
    if math.isfinite(numeric):
        return numeric
    return default


def parse_object_id(value, label: str = "identifier") -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value or "").strip())
    except (InvalidId, TypeError):
        raise BadRequest(f"Invalid {label}.")


def to_json(value):
    """Make a MongoDB document (or list of them) JSON friendly."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat() + "Z"
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value


def insert_result(result) -> Dict[str, object]:
    return {
        "acknowledged": result.acknowledged,
        "insertedId": str(result.inserted_id),
    }


def update_result(result) -> Dict[str, object]:
    upserted_id = result.upserted_id
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": str(upserted_id) if upserted_id is not None else None,
    }


def created_at_of(document) -> Optional[datetime]:
    created_at = document.get("created_at")
    if isinstance(created_at, datetime):
        return created_at
    document_id = document.get("_id")
    if isinstance(document_id, ObjectId):
        # generation_time is tz-aware; stored timestamps are naive UTC
        return document_id.generation_time.replace(tzinfo=None)
    return None


def json_object(payload) -> Dict:
    """Request bodies must be JSON objects; anything else is a bad request."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise BadRequest("Request body must be a JSON object.")
    return payload
