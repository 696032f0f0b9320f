"""
Credential Service - FastAPI application exposing register and login
"""
from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging

from .config import Settings, settings as default_settings
from .db import create_engine_from_settings
from .routes import health
from .schemas import AuthResponse, LoginRequest, RegisterRequest
from .service import AuthService
from .store import CredentialStore
from .utils.event_logger import configure_logging

logger = logging.getLogger(__name__)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The credential store and its connection pool are created on startup and
    disposed on shutdown; request handlers reach them through app.state.

    Args:
        settings: Settings override, defaults to the environment-loaded settings
    """
    settings = settings or default_settings
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = CredentialStore(
            create_engine_from_settings(settings),
            acquire_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
            query_timeout=settings.DB_QUERY_TIMEOUT_SECONDS,
        )
        # Failure is logged by the store; the service starts degraded
        await store.ensure_schema()
        app.state.store = store
        app.state.auth_service = AuthService(store)
        logger.info("Credential Service started")
        try:
            yield
        finally:
            await store.dispose()

    app = FastAPI(
        title="Credential Service",
        description="Username/password registration and login",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(_request: Request, exc: RequestValidationError):
        logger.info("Rejected malformed request body: %s", exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Invalid request body"},
        )

    app.include_router(health.router)

    @app.post("/register", response_model=AuthResponse)
    async def register(
        payload: RegisterRequest,
        request: Request,
        service: AuthService = Depends(get_auth_service),
    ):
        outcome = await service.register(payload, request)
        return JSONResponse(status_code=outcome.status_code, content=outcome.body())

    @app.post("/login", response_model=AuthResponse)
    async def login(
        payload: LoginRequest,
        request: Request,
        service: AuthService = Depends(get_auth_service),
    ):
        outcome = await service.login(payload, request)
        return JSONResponse(status_code=outcome.status_code, content=outcome.body())

    return app


app = create_app()
