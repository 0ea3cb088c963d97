"""Pydantic models for job hunt services.

Request and response models shared by CLI and API layers.
Services return these models; callers handle presentation.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from models import AuditLogEntry, ExperienceLevel, ListingStatus, LocationPreference


# =============================================================================
# Enums
# =============================================================================


class TaskStatus(str, Enum):
    """Async task statuses."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# =============================================================================
# Request Models
# =============================================================================


class ApplyRequest(BaseModel):
    """Request to generate documents for approved listings."""

    job_ids: list[str] | None = Field(
        default=None,
        description="Restrict processing to these listing IDs (still filtered to approved)",
    )


class StatusUpdateRequest(BaseModel):
    """Request to change a listing's status."""

    status: ListingStatus = Field(description="New listing status")
    detail: str = Field(default="", description="Optional note for the audit log")


class ProfileUpdate(BaseModel):
    """Full replacement of the editable profile fields."""

    target_titles: list[str] = Field(default_factory=list)
    target_locations: list[str] = Field(default_factory=list)
    target_companies: list[str] = Field(default_factory=list)
    industries: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    excluded_companies: list[str] = Field(default_factory=list)
    keyword_blacklist: list[str] = Field(default_factory=list)
    location_preference: LocationPreference = LocationPreference.REMOTE
    experience_level: ExperienceLevel = ExperienceLevel.MID
    min_salary: float | None = Field(default=None, ge=0)
    max_applications_per_run: int = Field(default=15, ge=1, le=100)
    notes: str | None = None
    resume_text: str | None = None
    resume_path: str | None = None


# =============================================================================
# Response Models
# =============================================================================


class ScanResult(BaseModel):
    """Per-stage counters from one scan run."""

    success: bool
    queries_run: int = 0
    raw_results: int = 0
    jobs_extracted: int = 0
    jobs_filtered: int = 0
    jobs_scored: int = 0
    jobs_saved: int = 0
    duplicates: int = 0
    jobs_enriched: int = 0
    message: str | None = None
    error: str | None = None


class ApplyJobResult(BaseModel):
    """Outcome of document generation for one listing."""

    id: str
    company: str
    title: str
    status: ListingStatus
    error: str | None = None


class ApplyResult(BaseModel):
    """Summary of one apply run."""

    success: bool
    jobs_processed: int = 0
    successful: int = 0
    failed: int = 0
    results: list[ApplyJobResult] = Field(default_factory=list)
    message: str | None = None


class StatusCounts(BaseModel):
    """Listing counts per status."""

    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)


class ListingDocuments(BaseModel):
    """Generated documents and processing history for one listing."""

    id: str
    company: str
    title: str
    status: ListingStatus
    tailored_resume_text: str | None = None
    cover_letter_text: str | None = None
    apply_log: list[AuditLogEntry] = Field(default_factory=list)


# =============================================================================
# Async Task Models
# =============================================================================


class TaskCreatedResponse(BaseModel):
    """Response when an async task is created."""

    task_id: str
    status: TaskStatus = TaskStatus.RUNNING


class TaskStatusResponse(BaseModel):
    """Response when polling task status."""

    task_id: str
    kind: str
    status: TaskStatus
    result: Any | None = None
    error: str | None = None
    created_at: str | None = None
    completed_at: str | None = None
