import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from quick_entry.api.routes import parse, preferences
from quick_entry.core import settings
from quick_entry.logger import get_logger, setup_logging
from quick_entry.manager import EntryParserService

logger = get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        if not os.getenv("OPENAI_API_KEY"):
            logger.info("OPENAI_API_KEY not set. Entries will be parsed locally only.")

        app.state.service = EntryParserService(data_dir=settings.DATA_DIR)

        logger.info("Services initialized.")
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="Quick Entry", lifespan=lifespan)

    app.include_router(parse.router)
    app.include_router(preferences.router)

    return app


app = create_app()
