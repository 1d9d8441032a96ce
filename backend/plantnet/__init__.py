from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_pymongo import PyMongo
from pymongo.database import Database
from pymongo.errors import PyMongoError
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Settings
from .context import EXTENSION_KEY, AppContext
from .errors import ApiError
from .payments import PaymentGateway, StripePayments


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    payments: Optional[PaymentGateway] = None,
) -> Flask:
    """Create and configure the Flask application."""
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    app.logger.setLevel(settings.log_level)

    # Honor proxy headers so secure cookies survive TLS termination.
    if settings.trusted_proxy_hops:
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=settings.trusted_proxy_hops,
            x_proto=settings.trusted_proxy_hops,
            x_host=settings.trusted_proxy_hops,
            x_port=settings.trusted_proxy_hops,
        )

    # --- Configuration ---
    app.config["JWT_SECRET_KEY"] = settings.token_secret
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = settings.token_lifetime
    app.config["JWT_TOKEN_LOCATION"] = ["cookies"]
    app.config["JWT_ACCESS_COOKIE_NAME"] = settings.token_cookie_name
    app.config["JWT_COOKIE_CSRF_PROTECT"] = False
    app.config["JWT_COOKIE_SECURE"] = settings.is_production
    app.config["JWT_COOKIE_SAMESITE"] = "None" if settings.is_production else "Strict"

    # --- Initialize extensions ---
    CORS(app, supports_credentials=True, origins=settings.allowed_origins or "*")
    JWTManager(app)

    if database is None:
        mongo = PyMongo(app, uri=settings.mongodb_uri)
        database = mongo.cx[settings.database_name]
    if payments is None:
        payments = StripePayments(
            settings.payment_secret_key, currency=settings.payment_currency
        )

    app.extensions[EXTENSION_KEY] = AppContext(
        settings=settings, database=database, payments=payments
    )

    try:
        database.users.create_index("email", unique=True)
    except PyMongoError as exc:
        app.logger.warning("Unable to ensure unique index for user emails: %s", exc)

    # --- Error handlers ---

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        if error.status_code >= 500:
            app.logger.error("Request failed: %s", error.message)
            return jsonify({"message": type(error).default_message}), error.status_code
        return error.to_response()

    @app.errorhandler(PyMongoError)
    def handle_database_error(error: PyMongoError):
        app.logger.error("Database error: %s", error)
        return jsonify({"message": ApiError.default_message}), 500

    # --- ROUTES ---
    from .routes import orders_bp, plants_bp, users_bp

    app.register_blueprint(users_bp)
    app.register_blueprint(plants_bp)
    app.register_blueprint(orders_bp)

    @app.get("/")
    def index():
        return "Hello from plantNet Server.."

    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    return app
