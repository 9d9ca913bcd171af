# sundayreg/api/errors.py
from __future__ import annotations

import logging

from fastapi import HTTPException

from sundayreg.exceptions import (
    RegistrationError,
    StoreError,
    UnknownCommunityError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_http(e: RegistrationError) -> HTTPException:
    """Generic message for the caller; the real detail goes to the log."""
    if isinstance(e, UnknownCommunityError):
        return HTTPException(status_code=404, detail=f"Unknown community: {e.community}")
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, StoreError):
        logger.error("store failure: %s", e)
        return HTTPException(
            status_code=503,
            detail="Registration could not be saved. Please try again later.",
        )
    logger.error("registration failure: %s", e)
    return HTTPException(status_code=500, detail="Something went wrong.")
