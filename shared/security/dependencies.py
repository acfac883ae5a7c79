from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from shared.exceptions import AuthenticationError, AuthorizationError
from .jwt_handler import verify_access_token

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


@dataclass(frozen=True)
class Identity:
    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


async def get_current_identity(request: Request, token: str = Depends(oauth2_scheme)) -> Identity:
    """Dependency to validate the JWT and resolve it to an (id, role) identity."""
    if not token:
        raise AuthenticationError("Could not validate credentials")

    payload = verify_access_token(token)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    user_id = payload.get("sub")
    role = payload.get("role", ROLE_USER)
    if user_id is None or role not in ROLES:
        raise AuthenticationError("Could not validate credentials")

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = str(user_id)
    return Identity(id=str(user_id), role=role)


async def get_current_user(identity: Identity = Depends(get_current_identity)) -> str:
    """Dependency returning only the user ID (sub)."""
    return identity.id


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise AuthorizationError("User role is not authorized to access this resource")
    return identity
