from shieldmate.database.database import create_db_and_tables
from shieldmate.utils.logger import setup_logging
from contextlib import asynccontextmanager
from shieldmate.core.config import get_settings, parse_comma_separated_origins
from shieldmate.core.error_handlers import register_exception_handlers
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shieldmate.internal import admin
from shieldmate.routers import (
    application,
    auth,
    mission,
    notification,
    organization,
    rating,
    template,
)
from shieldmate.core.telemetry import setup_telemetry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Perform application startup tasks before the FastAPI app begins serving requests.

    Runs logging setup, creates the database and tables, and initializes telemetry.
    """
    setup_logging()
    create_db_and_tables()
    setup_telemetry(app)
    yield


app = FastAPI(
    title="ShieldMate API",
    description="Matches skilled volunteers with non-profit organizations",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        str(origin)
        for origin in parse_comma_separated_origins(get_settings().BACKEND_CORS_ORIGINS)
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health", include_in_schema=False)
def health_check():
    """
    Provide the application's liveness state for health checks.

    Returns:
        dict: A mapping with key "status" and value "ok" indicating the service is healthy.
    """
    return {"status": "ok"}


app.include_router(auth.router)
app.include_router(mission.router)
app.include_router(application.router)
app.include_router(rating.router)
app.include_router(notification.router)
app.include_router(organization.router)
app.include_router(template.router)
app.include_router(admin.router)
