"""
Production FastAPI Application

Trip search, seat reservation and booking lifecycle behind one HTTP API.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.db_setting import create_db_and_tables
from src.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Trip Booking] Starting up...')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Trip Booking] Dependency injection wired')

    config = container.config_service()
    if config.STORAGE_BACKEND == 'memory':
        Logger.base.warning('🧠 [Trip Booking] In-memory storage, data is lost on restart')
    elif config.DEBUG:
        await create_db_and_tables()
        Logger.base.info('🗄️  [Trip Booking] Tables ensured (DEBUG mode)')

    Logger.base.info('✅ [Trip Booking] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Trip Booking] Shutting down...')

    if config.STORAGE_BACKEND == 'sqlalchemy':
        await container.database().dispose()
        Logger.base.info('🗄️  [Trip Booking] Database engine disposed')

    container.unwire()

    Logger.base.info('👋 [Trip Booking] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
