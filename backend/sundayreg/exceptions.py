# sundayreg/exceptions.py
from __future__ import annotations


class RegistrationError(Exception):
    """Base class for everything the registration services raise."""


class ValidationError(RegistrationError):
    """Submission rejected before anything was written."""


class UnknownCommunityError(ValidationError):
    def __init__(self, community: str):
        super().__init__(f"Unknown community: {community!r}")
        self.community = community


class StoreError(RegistrationError):
    """Append/read against the registration store failed. Fatal to a submission."""

    def __init__(self, message: str, appended: int = 0):
        super().__init__(message)
        # rows already written before the failure (the batch is not rolled back)
        self.appended = appended


class AggregationError(RegistrationError):
    """Dashboard recompute/publish failed. Logged, never surfaced to the registrant."""


class NotificationError(RegistrationError):
    def __init__(self, address: str, message: str = "send failed"):
        super().__init__(f"{address}: {message}")
        self.address = address
