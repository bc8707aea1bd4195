import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.api.routes.portfolio import router
from backend.core.http_client import close_http_client
from backend.core.observability import init_sentry
from backend.core.observability import setup_logging
from backend.settings import Settings


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("Portfolio feed starting up")
    yield
    await close_http_client()
    logger.info("Portfolio feed shutting down")


def create_app() -> FastAPI:
    """Build the API with logging and Sentry configured from settings."""

    settings = Settings()
    setup_logging(settings.log_level)
    init_sentry(settings)

    application = FastAPI(title="Portfolio Feed", lifespan=lifespan)
    application.include_router(router)
    return application


app = create_app()
