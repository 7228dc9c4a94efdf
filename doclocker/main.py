import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from doclocker.api.http import auth_router, documents_router, health_router, users_router
from doclocker.core.config import Settings
from doclocker.core.db import Database
from doclocker.core.exceptions import register_exception_handlers
from doclocker.core.logging import RequestLoggingMiddleware, configure_logging
from doclocker.core.security import TokenIssuer
from doclocker.domains.identity.otp import build_otp_provider
from doclocker.domains.notifications import NotificationDispatcher, build_mailer

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    dispatcher: Optional[NotificationDispatcher] = None
) -> FastAPI:
    """Сборка приложения; все зависимости хранятся в app.state"""
    settings = settings or Settings()
    configure_logging(settings.log_level, settings.log_json)

    database = database or Database(settings)
    dispatcher = dispatcher or NotificationDispatcher(build_mailer(settings), settings.email_from)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.create_all()
        logger.info("Database tables ready")
        yield
        await dispatcher.drain()
        await database.dispose()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Digital Document Locker",
        description="Хранение документов и ссылки общего доступа с ограниченным сроком",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.database = database
    app.state.token_issuer = TokenIssuer(settings)
    app.state.otp_provider = build_otp_provider(settings)
    app.state.dispatcher = dispatcher

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(documents_router, prefix=API_PREFIX)

    @app.get("/")
    async def root():
        """Корневой эндпоинт"""
        return {
            "success": True,
            "message": "Digital Document Locker API",
            "data": {"version": "1.0.0", "docs": "/docs", "health": "/health"}
        }

    return app
