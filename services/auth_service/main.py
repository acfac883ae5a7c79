from fastapi import FastAPI

from shared.config.database import create_tables
from shared.exceptions import register_exception_handlers
from shared.observability.setup import setup_observability

from .models import User  # noqa: F401
from .router import router, public_router

auth_app = FastAPI(
    title="Auth Service",
    version="2.0.0",
    description="JWT authentication: register, login, token validation.",
)

# Bootstrap observability (logging + tracing + metrics)
setup_observability(auth_app, "auth_service")
register_exception_handlers(auth_app)

auth_app.include_router(router)
auth_app.include_router(public_router)

@auth_app.on_event("startup")
async def startup_event() -> None:
    await create_tables()
