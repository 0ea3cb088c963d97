"""Job hunt services - framework-agnostic business logic layer.

Services wrap skills and stores and return structured data (Pydantic models).
No Rich imports, no console output. Callers handle presentation.
"""

from .apply_service import ApplyService
from .base_service import BaseService
from .batch_runner import BatchOutcome, chunked, run_in_batches
from .exceptions import (
    JobHuntError,
    ConfigurationError,
    ProfileNotFoundError,
    ListingNotFoundError,
    InvalidTransitionError,
    GenerationFailedError,
    ValidationError,
)
from .job_service import JobService
from .profile_service import ProfileService
from .scan_service import ScanService
from .task_manager import TaskManager

__all__ = [
    # Base
    "BaseService",
    # Services
    "ScanService",
    "ApplyService",
    "JobService",
    "ProfileService",
    "TaskManager",
    # Batching
    "BatchOutcome",
    "chunked",
    "run_in_batches",
    # Exceptions
    "JobHuntError",
    "ConfigurationError",
    "ProfileNotFoundError",
    "ListingNotFoundError",
    "InvalidTransitionError",
    "GenerationFailedError",
    "ValidationError",
]
