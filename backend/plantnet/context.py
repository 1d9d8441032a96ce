from dataclasses import dataclass

from flask import current_app
from pymongo.collection import Collection
from pymongo.database import Database

from .config import Settings
from .payments import PaymentGateway

EXTENSION_KEY = "plantnet"


@dataclass
class AppContext:
    """Everything a request handler needs, built once by ``create_app``."""

    settings: Settings
    database: Database
    payments: PaymentGateway

    @property
    def users(self) -> Collection:
        return self.database.users

    @property
    def plants(self) -> Collection:
        return self.database.plants

    @property
    def orders(self) -> Collection:
        return self.database.orders


def get_context() -> AppContext:
    return current_app.extensions[EXTENSION_KEY]
