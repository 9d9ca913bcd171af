import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Ensure all SQLAlchemy models are imported so metadata is complete
import sundayreg.models  # noqa: F401
from sundayreg.config import get_settings
from sundayreg.db import Base, engine
from sundayreg.logging_config import setup_logging

from sundayreg.api import (
    registrations,  # /registrations
    dashboards,     # /dashboards
)

# Ops/system endpoints (/health, /version)
from sundayreg.api.system import router as system_router

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s (store=%s, tz=%s)", settings.app_name, settings.store_backend, settings.timezone)
    if settings.store_backend == "sql":
        # alembic owns the schema in production; this keeps a fresh SQLite file usable
        Base.metadata.create_all(bind=engine)
    yield
    logger.info("Shutting down")


app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)

# --- CORS for the registration form ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(system_router)  # /health, /version
app.include_router(registrations.router)  # /registrations (router defines its own prefix)
app.include_router(dashboards.router)     # /dashboards
