import asyncio
import logging
from contextlib import asynccontextmanager

import sentry_sdk
from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from src.config.database import dispose_engine
from src.config.logging import setup_logging
from src.config.settings import settings
from src.guests.routers import router as guests_router
from src.hosts.routers import router as hosts_router
from src.notifications.container import get_notification_services
from src.reminders.router import get_reminder_scheduler
from src.reminders.router import router as reminders_router
from src.reminders.scheduler import ReminderSchedulerLoop
from src.routers.healthz.router import router as healthz_router

setup_logging()
logger = logging.getLogger(__name__)


async def run_migrations():
    alembic_cfg = Config("alembic.ini")
    await asyncio.to_thread(command.upgrade, alembic_cfg, "head")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        await run_migrations()

    dispatcher = get_notification_services().dispatcher
    dispatcher.start()
    app.state.host_notification_dispatcher = dispatcher

    reminder_loop = None
    if settings.REMINDER_SCHEDULER_ENABLED:
        reminder_loop = ReminderSchedulerLoop(get_reminder_scheduler(), run_hour=settings.reminder_run_hour)
        reminder_loop.start()
    app.state.reminder_loop = reminder_loop

    yield

    if reminder_loop:
        await reminder_loop.stop()
    # let queued host notifications go out before exiting
    await dispatcher.stop()
    logger.info("Background workers stopped")
    await dispose_engine()


if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        profiles_sample_rate=settings.SENTRY_PROFILES_SAMPLE_RATE,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
        ],
        send_default_pii=False,
    )

app = FastAPI(
    title="OwnRSVP API",
    description="RSVP responses, host notifications and reminders",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(healthz_router, prefix="/healthz", tags=["Healthz"])
app.include_router(guests_router, tags=["RSVP"])
app.include_router(hosts_router, tags=["Hosts"])
app.include_router(reminders_router, tags=["Reminders"])


@app.get("/", tags=["Root"])
async def root():
    return {"message": "Welcome to the OwnRSVP API"}
