"""Centralized data access layer for candidate profiles and job listings.

The pipeline only talks to the narrow ProfileStore / ListingStore interfaces.
DataStore is the bundled implementation: one JSON document for profiles and one
JSON document of listings per user under the configured data directory.
"""

import asyncio
import hashlib
import json
import re
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from config_loader import Settings
from models import CandidateProfile, JobListing, ListingStatus, utc_now

HASH_SEPARATOR = "|"


def compute_duplicate_hash(company: str | None, title: str | None, location: str | None) -> str:
    """Stable content hash over the normalized (company, title, location) triple.

    Examples:
        compute_duplicate_hash(" Globex ", "Backend Engineer", "Remote")
        == compute_duplicate_hash("globex", "backend engineer", "remote ")
    """
    parts = [(value or "").lower().strip() for value in (company, title, location)]
    return hashlib.sha256(HASH_SEPARATOR.join(parts).encode("utf-8")).hexdigest()


def generate_listing_id(company: str) -> str:
    """Build a readable listing ID, e.g. JOB-GLOBEX-3FA9C1."""
    slug = re.sub(r"[^a-z0-9]+", "-", (company or "unknown").lower()).strip("-") or "unknown"
    return f"JOB-{slug.upper()[:8]}-{uuid.uuid4().hex[:6].upper()}"


class ProfileStore(ABC):
    """Profiles keyed by user ID."""

    @abstractmethod
    async def get_profile(self, user_id: str) -> CandidateProfile | None: ...

    @abstractmethod
    async def save_profile(self, profile: CandidateProfile) -> CandidateProfile: ...


class ListingStore(ABC):
    """Listings scoped by user ID.

    Deduplication is check-then-insert via save_if_new(). An implementation
    backed by a unique (user_id, duplicate_hash) constraint can override
    save_if_new() with an atomic upsert without touching pipeline code.
    """

    @abstractmethod
    async def insert_listing(self, listing: JobListing) -> JobListing: ...

    @abstractmethod
    async def update_listing(self, user_id: str, listing_id: str, **fields) -> JobListing | None: ...

    @abstractmethod
    async def get_listing(self, user_id: str, listing_id: str) -> JobListing | None: ...

    @abstractmethod
    async def get_listings(
        self,
        user_id: str,
        status: ListingStatus | None = None,
        limit: int | None = None,
    ) -> list[JobListing]: ...

    @abstractmethod
    async def find_by_hash(self, user_id: str, duplicate_hash: str) -> JobListing | None: ...

    async def save_if_new(self, listing: JobListing) -> bool:
        """Insert the listing unless one with the same hash exists for the user.

        Returns:
            True if inserted, False if it was a duplicate (the stored one is kept).
        """
        existing = await self.find_by_hash(listing.user_id, listing.duplicate_hash)
        if existing:
            return False
        await self.insert_listing(listing)
        return True


class DataStore(ProfileStore, ListingStore):
    """JSON-file implementation of both stores.

    File I/O runs in a worker thread via asyncio.to_thread so the event loop
    stays responsive. A single lock serializes every read-modify-write, which
    also makes save_if_new atomic per store instance. Each insert or update
    rewrites the whole listings file for that user, so writes are O(n) in the
    number of stored listings; a database-backed ListingStore is the way past
    a few thousand listings per user.
    """

    def __init__(self, settings: Settings):
        """Initialize the data store.

        Args:
            settings: Settings providing the data directory.
        """
        self.settings = settings
        self.data_dir = Path(settings.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    # =========================================================================
    # Profiles
    # =========================================================================

    async def get_profile(self, user_id: str) -> CandidateProfile | None:
        return await self._run(self._get_profile_sync, user_id)

    async def save_profile(self, profile: CandidateProfile) -> CandidateProfile:
        return await self._run(self._save_profile_sync, profile)

    # =========================================================================
    # Listings
    # =========================================================================

    async def insert_listing(self, listing: JobListing) -> JobListing:
        return await self._run(self._insert_listing_sync, listing)

    async def update_listing(self, user_id: str, listing_id: str, **fields) -> JobListing | None:
        """Apply a partial update to one listing.

        Returns:
            The updated listing, or None if it does not exist for this user.
        """
        return await self._run(self._update_listing_sync, user_id, listing_id, fields)

    async def get_listing(self, user_id: str, listing_id: str) -> JobListing | None:
        for listing in await self._run(self._read_listings, user_id):
            if listing.id == listing_id:
                return listing
        return None

    async def get_listings(
        self,
        user_id: str,
        status: ListingStatus | None = None,
        limit: int | None = None,
    ) -> list[JobListing]:
        """Get a user's listings, highest score first."""
        listings = await self._run(self._read_listings, user_id)
        if status is not None:
            listings = [item for item in listings if item.status == status]

        listings.sort(key=lambda item: item.score, reverse=True)

        if limit is not None:
            listings = listings[:limit]
        return listings

    async def find_by_hash(self, user_id: str, duplicate_hash: str) -> JobListing | None:
        for listing in await self._run(self._read_listings, user_id):
            if listing.duplicate_hash == duplicate_hash:
                return listing
        return None

    async def save_if_new(self, listing: JobListing) -> bool:
        """Check and insert under one lock acquisition."""
        return await self._run(self._save_if_new_sync, listing)

    # =========================================================================
    # Internal
    # =========================================================================

    async def _run(self, func, *args):
        return await asyncio.to_thread(self._locked, func, *args)

    def _locked(self, func, *args):
        with self._lock:
            return func(*args)

    def _get_profile_sync(self, user_id: str) -> CandidateProfile | None:
        data = self._load(self._profiles_file(), "profiles", {})
        raw = data["profiles"].get(user_id)
        if not raw:
            return None
        return CandidateProfile.model_validate(raw)

    def _save_profile_sync(self, profile: CandidateProfile) -> CandidateProfile:
        profile = profile.model_copy(update={"updated_at": utc_now()})
        profiles_file = self._profiles_file()
        data = self._load(profiles_file, "profiles", {})
        data["profiles"][profile.user_id] = profile.model_dump(mode="json")
        self._save(profiles_file, data)
        return profile

    def _insert_listing_sync(self, listing: JobListing) -> JobListing:
        listings_file = self._listings_file(listing.user_id)
        data = self._load(listings_file, "listings", [])

        if any(item.get("id") == listing.id for item in data["listings"]):
            raise ValueError(f"Listing ID already exists: {listing.id}")

        data["listings"].append(listing.model_dump(mode="json"))
        self._save(listings_file, data)
        return listing

    def _update_listing_sync(self, user_id: str, listing_id: str, fields: dict) -> JobListing | None:
        listings_file = self._listings_file(user_id)
        data = self._load(listings_file, "listings", [])

        for i, raw in enumerate(data["listings"]):
            if raw.get("id") == listing_id and raw.get("user_id") == user_id:
                merged = {**raw, **fields, "updated_at": utc_now()}
                listing = JobListing.model_validate(merged)
                data["listings"][i] = listing.model_dump(mode="json")
                self._save(listings_file, data)
                return listing

        return None

    def _save_if_new_sync(self, listing: JobListing) -> bool:
        for existing in self._read_listings(listing.user_id):
            if existing.duplicate_hash == listing.duplicate_hash:
                return False
        self._insert_listing_sync(listing)
        return True

    def _read_listings(self, user_id: str) -> list[JobListing]:
        data = self._load(self._listings_file(user_id), "listings", [])
        return [
            JobListing.model_validate(raw)
            for raw in data["listings"]
            if raw.get("user_id") == user_id
        ]

    def _profiles_file(self) -> Path:
        return self.data_dir / "profiles.json"

    def _listings_file(self, user_id: str) -> Path:
        slug = re.sub(r"[^a-z0-9]+", "-", user_id.lower()).strip("-") or "default"
        return self.data_dir / f"listings-{slug}.json"

    def _load(self, path: Path, key: str, empty) -> dict:
        """Load a JSON document, returning an empty one if the file is missing."""
        if not path.exists():
            return {key: empty, "updated_at": None}

        with open(path) as f:
            return json.load(f)

    def _save(self, path: Path, data: dict) -> None:
        data["updated_at"] = utc_now()
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
