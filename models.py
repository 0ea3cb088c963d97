"""Domain models shared by stores, skills and services.

Kept outside the services package so that the storage layer can use them
without importing service code.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_MAX_APPLICATIONS = 15


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Enums
# =============================================================================


class LocationPreference(str, Enum):
    """Where the candidate is willing to work."""

    REMOTE = "remote"
    HYBRID = "hybrid"
    ONSITE = "onsite"
    ANY = "any"


class ExperienceLevel(str, Enum):
    """Candidate seniority."""

    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    EXECUTIVE = "executive"


class ListingStatus(str, Enum):
    """Lifecycle states of a job listing."""

    PENDING = "pending"
    APPROVED = "approved"
    SKIPPED = "skipped"
    MANUAL_REQUIRED = "manual_required"
    GENERATING_DOCS = "generating_docs"
    READY_TO_APPLY = "ready_to_apply"
    FAILED = "failed"
    APPLIED = "applied"


# =============================================================================
# Candidate profile
# =============================================================================


class CandidateProfile(BaseModel):
    """Search preferences and background for one user."""

    user_id: str
    target_titles: list[str] = Field(default_factory=list)
    target_locations: list[str] = Field(default_factory=list)
    target_companies: list[str] = Field(default_factory=list)
    industries: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    excluded_companies: list[str] = Field(default_factory=list)
    keyword_blacklist: list[str] = Field(default_factory=list)
    location_preference: LocationPreference = LocationPreference.REMOTE
    experience_level: ExperienceLevel = ExperienceLevel.MID
    min_salary: float | None = None
    max_applications_per_run: int = DEFAULT_MAX_APPLICATIONS
    notes: str | None = None
    resume_text: str | None = None
    resume_path: str | None = None
    updated_at: str | None = None


# =============================================================================
# Pipeline records
# =============================================================================


class RawSearchResult(BaseModel):
    """One hit returned by the search service. Never persisted."""

    url: str | None = None
    title: str | None = None
    description: str | None = None
    markdown: str | None = None

    @property
    def content(self) -> str:
        return self.markdown or self.description or ""


class ExtractedListing(BaseModel):
    """A listing as returned by the extraction model, before scoring."""

    company: str = Field(min_length=1)
    title: str = Field(min_length=1)
    url: str | None = None
    description: str | None = None
    location: str | None = None
    salary_info: str | None = None


class ScoredListing(BaseModel):
    """An extracted listing with its fit score and optional company summary."""

    listing: ExtractedListing
    score: int
    company_summary: str | None = None


class AuditLogEntry(BaseModel):
    """One append-only processing event on a listing."""

    step: str
    detail: str = ""
    timestamp: str = Field(default_factory=utc_now)


class JobListing(BaseModel):
    """A persisted job posting owned by one user."""

    id: str
    user_id: str
    company: str
    title: str
    url: str | None = None
    description: str | None = None
    location: str | None = None
    salary_info: str | None = None
    company_summary: str | None = None
    score: int = 0
    status: ListingStatus = ListingStatus.PENDING
    source: str | None = None
    duplicate_hash: str
    tailored_resume_text: str | None = None
    cover_letter_text: str | None = None
    apply_log: list[AuditLogEntry] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)
