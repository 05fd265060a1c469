"""
FastAPI application entry point

Run:
    Option 1: run the module
        python -m medilinko.main

    Option 2: uvicorn
        uvicorn medilinko.main:app --host 0.0.0.0 --port 8000
"""
import logging
from contextlib import asynccontextmanager

from medilinko.app.config import settings

# logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logging.getLogger("uvicorn").setLevel(logging.INFO)
logging.getLogger("uvicorn.access").setLevel(logging.INFO)
logger = logging.getLogger(__name__)

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from medilinko.app.api.routes import router
from medilinko.app.middleware.logging import LoggingMiddleware
from medilinko.app.middleware.exception_handler import (
    exception_handler,
    validation_exception_handler,
    http_exception_handler
)
from medilinko.domain.reminders.adapters import SqlMedicineStore, SqlNotificationFeed, SqlPatientDirectory
from medilinko.domain.reminders.clock import SchedulerTimerSource, SystemClock
from medilinko.domain.reminders.dispatcher import ReminderDispatcher
from medilinko.domain.reminders.scheduler import ReminderScheduler
from medilinko.infrastructure.database.connection import dispose_engine
from medilinko.infrastructure.push.fcm_gateway import create_push_gateway

VERSION = "1.0.0"


def create_reminder_scheduler(push_gateway, timer_source: SchedulerTimerSource) -> ReminderScheduler:
    """
    Wire the reminder scheduler to the database and the push gateway

    Args:
        push_gateway: push service
        timer_source: APScheduler-backed timers

    Returns:
        ReminderScheduler (not started)
    """
    dispatcher = ReminderDispatcher(
        directory=SqlPatientDirectory(),
        push_gateway=push_gateway,
        feed=SqlNotificationFeed(),
    )
    return ReminderScheduler(
        store=SqlMedicineStore(),
        dispatcher=dispatcher,
        timer_source=timer_source,
        clock=SystemClock(),
        min_delay=settings.REMINDER_MIN_DELAY_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle

    Args:
        app: FastAPI application
    """
    logger.info("=" * 60)
    logger.info("MediLinko starting...")
    logger.info("=" * 60)

    push_gateway = create_push_gateway()
    app.state.push_gateway = push_gateway
    app.state.reminder_scheduler = None
    timer_source = SchedulerTimerSource()

    try:
        if settings.REMINDER_SCHEDULER_ENABLED:
            timer_source.start()
            scheduler = create_reminder_scheduler(push_gateway, timer_source)
            await scheduler.start()
            app.state.reminder_scheduler = scheduler
            logger.info(f"   ✓ Reminder scheduler started ({len(scheduler.registry)} timers)")
        else:
            logger.info("   ✓ Reminder scheduler disabled")

        logger.info("MediLinko started")
        yield

    finally:
        logger.info("MediLinko shutting down...")
        scheduler = app.state.reminder_scheduler
        if scheduler is not None:
            scheduler.stop()
        await timer_source.shutdown()
        try:
            await dispose_engine()
        except Exception as e:
            logger.error(f"Error closing database engine: {e}", exc_info=True)
        logger.info("MediLinko stopped")


app = FastAPI(
    title="MediLinko Backend",
    description="Medicine tracker, reminder scheduler and notification feed",
    version=VERSION,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)

# exception handlers
app.add_exception_handler(Exception, exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)

# routes (sub-routers carry the /api/v1 prefix)
app.include_router(router)


@app.get("/health")
async def health_check():
    """
    Health check

    Returns:
        status and version
    """
    return {
        "status": "ok",
        "version": VERSION
    }


def run_server() -> None:
    """
    Start uvicorn with host and port from the settings
    """
    uvicorn.run(
        "medilinko.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run_server()
