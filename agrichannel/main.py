import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from agrichannel import models  # noqa: F401  registers tables on Base.metadata
from agrichannel.core.config import DEFAULT_SECRET_KEY, Settings, get_settings
from agrichannel.core.database import Base, create_db_engine, create_session_factory, translate_db_error
from agrichannel.core.errors import AppError, StorageError
from agrichannel.routers import auth, health, posts, realtime
from agrichannel.services.broadcaster import Broadcaster
from agrichannel.services.image_intake import ImageIntake
from agrichannel.services.keepalive import KeepAlive

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    def storage_failure(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
        message = type(exc).default_message if settings.is_production else exc.message
        return _error_response(exc.status_code, message)

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if isinstance(exc, StorageError):
            return storage_failure(request, exc)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(SQLAlchemyError)
    async def handle_db_error(request: Request, exc: SQLAlchemyError):
        return storage_failure(request, translate_db_error(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error_response(400, f"Invalid request: {detail}")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("%s %s failed", request.method, request.url.path)
        message = "Server error" if settings.is_production else str(exc)
        return _error_response(500, message)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    engine = create_db_engine(settings)

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.images = ImageIntake(settings.media_root, settings.max_upload_bytes)
    app.state.broadcaster = Broadcaster(settings.online_count_interval_seconds)
    app.state.keepalive = (
        KeepAlive(settings.resolved_keepalive_url, settings.keepalive_interval_seconds)
        if settings.keepalive_enabled
        else None
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def prepare_storage():
        storage_path = engine.url.database
        if storage_path and storage_path != ":memory:":
            Path(storage_path).parent.mkdir(parents=True, exist_ok=True)
        Path(settings.media_root).mkdir(parents=True, exist_ok=True)

        Base.metadata.create_all(bind=engine)
        logger.info("Database ready at %s", storage_path)

        if settings.is_production and settings.secret_key == DEFAULT_SECRET_KEY:
            logger.warning("SECRET_KEY is not set; tokens are signed with the default key")

    @app.on_event("startup")
    async def start_background_tasks():
        app.state.broadcaster.start()
        if app.state.keepalive is not None:
            app.state.keepalive.start()

    @app.on_event("shutdown")
    async def stop_background_tasks():
        await app.state.broadcaster.stop()
        if app.state.keepalive is not None:
            await app.state.keepalive.stop()
        engine.dispose()

    register_exception_handlers(app, settings)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(realtime.router)

    # Uploaded images, served read-only under the same names stored on posts
    app.mount(
        settings.media_url,
        StaticFiles(directory=settings.media_root, check_dir=False),
        name="media",
    )

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("agrichannel.main:app", host=settings.host, port=settings.port, proxy_headers=True)
