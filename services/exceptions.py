"""Typed exception hierarchy for job hunt services.

Services raise these exceptions instead of printing to console.
Callers (CLI, API) catch and present them appropriately.
"""


class JobHuntError(Exception):
    """Base exception for all job hunt service errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(JobHuntError):
    """Raised when credentials or other required settings are missing."""

    def __init__(self, message: str, setting: str | None = None):
        super().__init__(message, {"setting": setting})
        self.setting = setting


class ProfileNotFoundError(JobHuntError):
    """Raised when the user has no candidate profile."""

    def __init__(self, user_id: str):
        super().__init__(
            "No candidate profile found. Create one with 'jobhunt profile --set-file profile.json'.",
            {"user_id": user_id},
        )
        self.user_id = user_id


class ListingNotFoundError(JobHuntError):
    """Raised when a listing ID cannot be found for the user."""

    def __init__(self, listing_id: str):
        super().__init__(f"Listing not found: {listing_id}", {"listing_id": listing_id})
        self.listing_id = listing_id


class InvalidTransitionError(JobHuntError):
    """Raised when a status change is not in the transition table."""

    def __init__(self, listing_id: str, current: str, requested: str, allowed: list[str]):
        super().__init__(
            f"Cannot move {listing_id} from {current} to {requested}",
            {"listing_id": listing_id, "current": current, "requested": requested, "allowed": allowed},
        )
        self.listing_id = listing_id
        self.current = current
        self.requested = requested


class GenerationFailedError(JobHuntError):
    """Raised when AI generation fails in a way the caller must see."""

    def __init__(self, operation: str, reason: str | None = None):
        msg = f"{operation} failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"operation": operation, "reason": reason})
        self.operation = operation
        self.reason = reason


class ValidationError(JobHuntError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, {"field": field})
        self.field = field
