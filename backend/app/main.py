import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.database import engine, Base
from app.core.exceptions import BlogAPIError, InternalError
from app.core.logging_config import setup_logging
from app.api.routes import comments, posts, users

# Register every model with Base.metadata before create_all and mapper setup
from app.models import comment, post, user  # noqa: F401

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create missing tables and flag the placeholder signing secret.
    Schema migrations are managed outside this service.
    """
    Base.metadata.create_all(bind=engine)
    if settings.uses_default_secret_key():
        logger.warning(
            "SECRET_KEY is the built-in default; tokens can be forged. "
            "Set SECRET_KEY in the environment."
        )
    yield


def _error_response(status_code: int, message: str) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    # Drop the "body"/"path"/"query" prefix so the field name leads
    loc = [str(part) for part in first.get("loc", ())[1:]]
    field = ".".join(loc) or str(first.get("loc", ("request",))[0])
    return f"{field}: {first.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """Turn every error into a {"error": message} body; nothing escapes unhandled"""

    @app.exception_handler(BlogAPIError)
    async def handle_app_error(request: Request, exc: BlogAPIError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.message, exc.context)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return _error_response(400, _describe_validation_error(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error_response(500, InternalError.default_message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Details stay in the server log; the caller gets a generic message
        logger.error("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error_response(500, InternalError.default_message)


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Blog API",
        description="Users, posts and comments with JWT authentication",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def enforce_request_timeout(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=settings.REQUEST_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.warning(
                "%s %s exceeded %.1fs",
                request.method,
                request.url.path,
                settings.REQUEST_TIMEOUT_SECONDS,
            )
            return _error_response(504, "Request timed out")

    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(posts.router)
    app.include_router(comments.router)

    @app.get("/")
    def root():
        """Root endpoint - API information"""
        return {"message": "Blog API", "version": API_VERSION}

    @app.get("/health")
    def health():
        """Health check endpoint - used by monitoring/deployment tools"""
        return {"status": "healthy"}

    return app


app = create_app()
