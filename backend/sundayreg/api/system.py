# sundayreg/api/system.py
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sundayreg.config import Settings, get_settings
from sundayreg.dependencies import get_db

router = APIRouter(tags=["ops"])


def _db_driver_from_url(url: str | None) -> str | None:
    if not url or "://" not in url:
        return None
    scheme = url.split("://", 1)[0]  # e.g., "postgresql+psycopg2"
    if "+" in scheme:
        return scheme.split("+", 1)[1]  # "psycopg2"
    return scheme  # fallback


@router.get("/health")
def health(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """Liveness check with a lightweight DB probe and local time."""
    now_local = datetime.now(settings.tz).isoformat()

    probe = {"status": "skip", "driver": _db_driver_from_url(settings.database_url)}
    if settings.store_backend == "sql":
        try:
            db.execute(text("SELECT 1"))
            probe["status"] = "ok"
        except SQLAlchemyError as e:
            probe["status"] = f"error: {type(e).__name__}"

    return {
        "status": "ok",
        "time": {"tz": settings.timezone, "now": now_local},
        "db": probe,
    }


@router.get("/version")
def version(settings: Settings = Depends(get_settings)):
    """Minimal runtime info for the UI."""
    return {
        "app": settings.app_name,
        "store": settings.store_backend,
        "db_driver": _db_driver_from_url(settings.database_url),
        "tz": settings.timezone,
        "communities": sorted(settings.communities),
    }
