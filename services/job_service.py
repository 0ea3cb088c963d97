"""Job service - listing queries and user-driven status changes.

Pure data operations over the listing store and the status state machine.
No model calls.
"""

import logging

from models import AuditLogEntry, JobListing, ListingStatus
from pipeline_store import allowed_transitions, can_transition

from .base_service import BaseService
from .exceptions import InvalidTransitionError, ListingNotFoundError, ValidationError
from .models import ListingDocuments, StatusCounts

logger = logging.getLogger(__name__)

# Statuses only document generation may set
GENERATED_STATUSES = frozenset({
    ListingStatus.GENERATING_DOCS,
    ListingStatus.READY_TO_APPLY,
    ListingStatus.FAILED,
})


class JobService(BaseService):
    """Service for listing queries and manual status changes."""

    async def get_listings(
        self,
        user_id: str,
        status: ListingStatus | None = None,
        limit: int | None = None,
    ) -> list[JobListing]:
        """Get a user's listings, highest score first.

        Args:
            user_id: Owner of the listings.
            status: Only return listings in this status.
            limit: Maximum number of listings.
        """
        if limit is not None and limit < 1:
            raise ValidationError("limit must be at least 1", field="limit")
        return await self.listings.get_listings(user_id, status=status, limit=limit)

    async def get_listing(self, user_id: str, listing_id: str) -> JobListing:
        """Get one listing.

        Raises:
            ListingNotFoundError: If the listing does not exist for this user.
        """
        listing = await self.listings.get_listing(user_id, listing_id)
        if not listing:
            raise ListingNotFoundError(listing_id)
        return listing

    async def set_status(
        self,
        user_id: str,
        listing_id: str,
        new_status: ListingStatus,
        detail: str = "",
    ) -> JobListing:
        """Apply a user action (approve, skip, retry, ...) to a listing.

        Args:
            user_id: Owner of the listing.
            listing_id: The listing ID.
            new_status: Requested status.
            detail: Optional note recorded in the audit log.

        Returns:
            The updated listing.

        Raises:
            ListingNotFoundError: If the listing does not exist.
            ValidationError: If new_status can only be set by document generation.
            InvalidTransitionError: If the transition table forbids the change.
        """
        listing = await self.get_listing(user_id, listing_id)

        if new_status in GENERATED_STATUSES:
            raise ValidationError(
                f"Status '{new_status.value}' is set by document generation", field="status"
            )

        if not can_transition(listing.status, new_status):
            raise InvalidTransitionError(
                listing_id,
                listing.status.value,
                new_status.value,
                allowed_transitions(listing.status),
            )

        updated = await self.pipeline.transition(
            user_id, listing_id, new_status, detail=detail or "Status changed by user"
        )
        if updated is None:
            # Deleted or changed underneath us
            raise ListingNotFoundError(listing_id)

        logger.info("%s: %s -> %s", listing_id, listing.status.value, new_status.value)
        return updated

    async def add_note(self, user_id: str, listing_id: str, note: str) -> list[AuditLogEntry]:
        """Record a free-text note in the audit log without changing status.

        Returns:
            The listing's audit log including the new entry.
        """
        if not note.strip():
            raise ValidationError("Note must not be empty", field="note")

        await self.get_listing(user_id, listing_id)
        if not await self.pipeline.append_log(user_id, listing_id, "note", note.strip()):
            raise ListingNotFoundError(listing_id)
        return await self.pipeline.get_log(user_id, listing_id)

    async def get_audit_log(self, user_id: str, listing_id: str) -> list[AuditLogEntry]:
        """Get a listing's audit entries, oldest first."""
        await self.get_listing(user_id, listing_id)
        return await self.pipeline.get_log(user_id, listing_id)

    async def get_counts(self, user_id: str) -> StatusCounts:
        """Count a user's listings per status. Every status is present, zero or not."""
        listings = await self.listings.get_listings(user_id)

        by_status = {status.value: 0 for status in ListingStatus}
        for listing in listings:
            by_status[listing.status.value] += 1

        return StatusCounts(total=len(listings), by_status=by_status)

    async def get_documents(self, user_id: str, listing_id: str) -> ListingDocuments:
        """Get the generated documents and audit log of one listing."""
        listing = await self.get_listing(user_id, listing_id)
        return ListingDocuments(
            id=listing.id,
            company=listing.company,
            title=listing.title,
            status=listing.status,
            tailored_resume_text=listing.tailored_resume_text,
            cover_letter_text=listing.cover_letter_text,
            apply_log=listing.apply_log,
        )
