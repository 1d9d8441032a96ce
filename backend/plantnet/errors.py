from typing import Optional

from flask import jsonify


class ApiError(Exception):
    status_code = 500
    default_message = "internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self):
        return jsonify({"message": self.message}), self.status_code


class BadRequest(ApiError):
    status_code = 400
    default_message = "bad request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "unauthorized access"


class InvalidToken(Unauthorized):
    pass


class ExpiredToken(Unauthorized):
    pass


class Forbidden(ApiError):
    status_code = 403
    default_message = "forbidden access"


class NotFound(ApiError):
    status_code = 404
    default_message = "not found"


class PaymentProviderError(ApiError):
    default_message = "payment provider request failed"
