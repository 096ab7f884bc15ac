"""
User directory auth service.

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from userauth.api.gateway import RpcGateway
from userauth.api.middleware.request_id import RequestIdMiddleware
from userauth.api.v1 import router as api_v1_router
from userauth.config import Settings, get_settings
from userauth.database import build_engine, build_session_factory, close_db, init_db
from userauth.kernel.identity import AccountService, DirectoryQuery, PasswordHasher, TokenIssuer
from userauth.kernel.repository import SqlAlchemyUserRepository, UserRepository
from userauth.logging_config import configure_logging, get_logger
from userauth.schemas.common import HealthResponse
from userauth.services.email import Notifier

logger = get_logger(__name__)


def build_gateway(
    settings: Settings,
    repository: UserRepository,
    notifier: Optional[Notifier] = None,
) -> RpcGateway:
    """Wire the core components around a repository."""
    accounts = AccountService(
        repository=repository,
        hasher=PasswordHasher(),
        issuer=TokenIssuer.from_settings(settings),
        notifier=notifier or Notifier.from_settings(settings),
    )
    return RpcGateway(accounts=accounts, directory=DirectoryQuery(repository))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        configure_logging(
            log_level=settings.log_level,
            environment=settings.environment,
            debug=settings.debug,
        )
        logger.info("Starting %s v%s", settings.project_name, settings.version)

        engine = build_engine(settings)
        await init_db(engine)
        logger.info("Database initialized")

        notifier = Notifier.from_settings(settings)
        repository = SqlAlchemyUserRepository(build_session_factory(engine))
        app.state.gateway = build_gateway(settings, repository, notifier)

        yield

        logger.info("Shutting down...")
        await notifier.drain()
        await close_db(engine)
        logger.info("Database connections closed")

    app = FastAPI(
        title=settings.project_name,
        description="Account registration, login, confirmation and password recovery.",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Last added = outermost; CORS wraps everything
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        content = {"status_code": exc.status_code, "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"status_code": 400, "message": "Validation error", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Hashing/signing failures and other faults end up here."""
        logger.exception("Unhandled exception: %s", exc)
        req_id = getattr(request.state, "request_id", None)
        content = {"status_code": 500, "message": "Internal server error", "request_id": req_id}
        if settings.debug:
            content["detail"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        return HealthResponse(status="ok", version=settings.version)

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.project_name,
            "version": settings.version,
            "api": {"v1": settings.api_v1_prefix},
        }

    app.include_router(api_v1_router, prefix=settings.api_v1_prefix)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "userauth.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
