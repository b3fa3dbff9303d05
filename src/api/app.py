from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

from src.adapter.realtime.connection_manager import ConnectionManager
from src.adapter.services.cleanup_scheduler import CleanupScheduler
from src.adapter.services.email_service import HttpEmailService, LoggingEmailService
from src.app.services.cleanup import ExpiredRowCleaner
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code} - {exc.base_error.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def init_db():
    from src.depends import engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def build_email_service(ApplicationConfig):
    if ApplicationConfig.EMAIL_BACKEND == "http":
        return HttpEmailService(
            api_url=ApplicationConfig.EMAIL_API_URL,
            api_key=ApplicationConfig.EMAIL_API_KEY,
            from_email=ApplicationConfig.EMAIL_FROM,
            frontend_url=ApplicationConfig.FRONTEND_URL,
            timeout=ApplicationConfig.EMAIL_TIMEOUT_SECONDS,
        )
    return LoggingEmailService(frontend_url=ApplicationConfig.FRONTEND_URL)


def build_cleanup_scheduler(ApplicationConfig):
    from src.depends import open_unit_of_work

    cleaner = ExpiredRowCleaner(
        open_unit_of_work,
        retention=timedelta(hours=ApplicationConfig.TOKEN_RETENTION_HOURS),
    )
    return CleanupScheduler(cleaner, ApplicationConfig.CLEANUP_INTERVAL_MINUTES * 60)


def create_app(ApplicationConfig) -> FastAPI:
    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if ApplicationConfig.DB_CREATE_TABLES:
            await init_db()
        app.state.notifier.start()
        app.state.cleanup.start()
        yield
        await app.state.cleanup.stop()
        await app.state.notifier.stop()
        await app.state.email_service.close()

    app = FastAPI(title="Account Service", version="0.1.0", lifespan=lifespan)

    app.state.notifier = ConnectionManager(queue_size=ApplicationConfig.REALTIME_QUEUE_SIZE)
    app.state.email_service = build_email_service(ApplicationConfig)
    app.state.cleanup = build_cleanup_scheduler(ApplicationConfig)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import auth, health_check, realtime, sessions, users

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(users.router, tags=["User"])
    app.include_router(sessions.router, tags=["Sessions"])
    app.include_router(realtime.router, tags=["Realtime"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
