"""
Identity provider for the back-office: accounts, bcrypt password hashes and
the JWTs the other services decode into an (id, role) identity.

Admin accounts are those whose email appears in ADMIN_EMAILS at registration.
"""
import os

import structlog
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from shared.security.dependencies import ROLE_ADMIN, ROLE_USER
from shared.security.jwt_handler import create_access_token

from .models import User
from .repository import UserRepository
from .schemas import TokenResponse, UserCreate, UserLogin

logger = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ADMIN_EMAILS = {
    email.strip().lower()
    for email in os.getenv("ADMIN_EMAILS", "").split(",")
    if email.strip()
}


class AuthService:

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        email = data.email.lower()
        existing = await UserRepository.get_by_email(db, email)
        if existing:
            raise ValidationError("Email already registered", field="email")
        user = User(
            email=email,
            name=data.name,
            hashed_password=AuthService._hash_password(data.password),
            role=ROLE_ADMIN if email in ADMIN_EMAILS else ROLE_USER,
        )
        user = await UserRepository.create(db, user)
        logger.info("user_registered", user_id=user.id, role=user.role)
        return user

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email)
        if not user or not AuthService._verify_password(data.password, user.hashed_password):
            raise AuthenticationError("Incorrect email or password")
        if not user.is_active:
            raise AuthorizationError("Account is disabled")
        token = create_access_token(data={"sub": str(user.id), "role": user.role})
        return TokenResponse(access_token=token)

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: str) -> User:
        user = await UserRepository.get_by_id(db, int(user_id)) if user_id.isdigit() else None
        if not user:
            raise NotFoundError("User not found")
        return user
