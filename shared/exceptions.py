"""
Error taxonomy shared by every service.

Services raise these instead of HTTPException so the same failure reads the
same way whether it surfaces from a repository, a domain helper or a route.
`register_exception_handlers()` maps each class onto its HTTP status code.
"""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "internal_error"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.error_code, **self.context}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"

    def __init__(self, message: str, field: str | None = None, **context):
        if field is not None:
            context["field"] = field
        super().__init__(message, **context)
        self.field = field


class InvalidStatusTransition(ValidationError):
    error_code = "invalid_status_transition"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "authentication_error"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "authorization_error"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class UnavailableError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "product_unavailable"


class InsufficientStockError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "insufficient_stock"

    def __init__(self, product_id: str, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for product {product_name}. "
            f"available: {available}, requested: {requested}",
            product_id=product_id,
            available=available,
            requested=requested,
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class InternalError(AppError):
    pass


# --- HANDLERS ---

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message, **exc.context)
        body = {"detail": "Internal Server Error", "error": exc.error_code}
    else:
        body = exc.to_dict()

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report pydantic's first complaint as a 400 naming the offending field."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    # Drop the leading "body"/"path"/"query" marker from the location
    field = ""
    for part in tuple(first.get("loc", ()))[1:]:
        field += f"[{part}]" if isinstance(part, int) else (f".{part}" if field else str(part))
    message = first.get("msg", "Invalid request")
    error = ValidationError(f"{field}: {message}" if field else message, field=field or None)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def datastore_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("datastore_error", path=request.url.path, method=request.method)
    error = InternalError("Internal Server Error")
    return JSONResponse(status_code=error.status_code, content={"detail": error.message, "error": error.error_code})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error", "error": InternalError.error_code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, datastore_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
