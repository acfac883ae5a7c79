from .jwt_handler import create_access_token, verify_access_token
from .dependencies import (
    Identity,
    ROLE_ADMIN,
    ROLE_USER,
    get_current_identity,
    get_current_user,
    require_admin,
)
from .rate_limiter import limiter, user_id_or_ip, ORDER_RATE_LIMIT

__all__ = [
    "create_access_token",
    "verify_access_token",
    "Identity",
    "ROLE_ADMIN",
    "ROLE_USER",
    "get_current_identity",
    "get_current_user",
    "require_admin",
    "limiter",
    "user_id_or_ip",
    "ORDER_RATE_LIMIT"
]
