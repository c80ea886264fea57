# flock/app/main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.cors import CORSMiddleware

from flock.app.api.errors import register_exception_handlers
from flock.app.api.v1.router import api_router
from flock.app.core.config import Settings, settings
from flock.app.core.logging import access_log_middleware, setup_logging
from flock.app.db.session import engine
from flock.app.db.init_db import init_models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: Settings = app.state.config
    await init_models(engine)
    if not config.uses_remote_bucket:
        Path(config.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
    logger.info("%s %s started (%s)", config.PROJECT_NAME, config.PROJECT_VERSION, config.ENVIRONMENT)
    yield
    await engine.dispose()


def create_app(config: Settings = settings) -> FastAPI:
    setup_logging(config.LOG_LEVEL)

    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.PROJECT_VERSION,
        lifespan=lifespan,
    )
    app.state.config = config

    if config.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.BACKEND_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Continuation-Token"],
        )
    app.middleware("http")(access_log_middleware)

    register_exception_handlers(app)
    app.include_router(api_router)

    if not config.uses_remote_bucket:
        # Uploaded avatars are served by the app itself in local mode
        app.mount(
            config.MEDIA_URL.rstrip("/") or "/media",
            StaticFiles(directory=config.MEDIA_ROOT, check_dir=False),
            name="media",
        )

    @app.get("/")
    def root():
        return {"message": f"Welcome to {config.PROJECT_NAME} API"}

    return app


app = create_app()
