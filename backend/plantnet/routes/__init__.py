from .orders import orders_bp
from .plants import plants_bp
from .users import users_bp

__all__ = ["orders_bp", "plants_bp", "users_bp"]
