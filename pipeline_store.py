"""Listing status state machine and append-only audit log.

Status changes go through PipelineStore so that the transition table below is
enforced in one place. The store underneath is any ListingStore.
"""

import logging

from data_store import ListingStore
from models import AuditLogEntry, JobListing, ListingStatus

logger = logging.getLogger(__name__)

S = ListingStatus

# Valid successor states per state
TRANSITIONS: dict[ListingStatus, frozenset[ListingStatus]] = {
    S.PENDING: frozenset({S.APPROVED, S.SKIPPED, S.MANUAL_REQUIRED}),
    S.APPROVED: frozenset({S.GENERATING_DOCS, S.MANUAL_REQUIRED, S.PENDING, S.FAILED}),
    S.GENERATING_DOCS: frozenset({S.READY_TO_APPLY, S.FAILED}),
    S.READY_TO_APPLY: frozenset({S.APPLIED}),
    S.FAILED: frozenset({S.APPROVED}),
    S.SKIPPED: frozenset({S.PENDING}),
    S.MANUAL_REQUIRED: frozenset({S.APPLIED}),
    S.APPLIED: frozenset(),
}


def can_transition(current: ListingStatus, new: ListingStatus) -> bool:
    """Check whether new is a valid successor of current."""
    return new in TRANSITIONS.get(current, frozenset())


def allowed_transitions(current: ListingStatus) -> list[str]:
    return sorted(status.value for status in TRANSITIONS.get(current, frozenset()))


class PipelineStore:
    """Applies status transitions and audit entries to stored listings."""

    def __init__(self, listings: ListingStore):
        self.listings = listings

    async def transition(
        self,
        user_id: str,
        listing_id: str,
        new_status: ListingStatus,
        step: str | None = None,
        detail: str = "",
        **fields,
    ) -> JobListing | None:
        """Move a listing to new_status and append an audit entry.

        Args:
            user_id: Owner of the listing.
            listing_id: The listing ID.
            new_status: Target status.
            step: Audit step name. Defaults to the new status value.
            detail: Audit detail text.
            **fields: Extra listing fields written in the same update.

        Returns:
            The updated listing, or None if the listing does not exist or the
            transition is not allowed from its current status.
        """
        listing = await self.listings.get_listing(user_id, listing_id)
        if not listing:
            return None

        if not can_transition(listing.status, new_status):
            logger.warning(
                "Rejected transition %s -> %s for %s",
                listing.status.value, new_status.value, listing_id,
            )
            return None

        log = self._with_entry(listing, step or new_status.value, detail)
        return await self.listings.update_listing(
            user_id,
            listing_id,
            status=new_status.value,
            apply_log=log,
            **fields,
        )

    async def append_log(self, user_id: str, listing_id: str, step: str, detail: str) -> bool:
        """Append an audit entry without changing status.

        Read, push, write back. Concurrent writers to the same listing can lose
        entries; there is no compare-and-swap.
        """
        listing = await self.listings.get_listing(user_id, listing_id)
        if not listing:
            return False

        log = self._with_entry(listing, step, detail)
        updated = await self.listings.update_listing(user_id, listing_id, apply_log=log)
        return updated is not None

    async def get_log(self, user_id: str, listing_id: str) -> list[AuditLogEntry]:
        listing = await self.listings.get_listing(user_id, listing_id)
        if not listing:
            return []
        return listing.apply_log

    @staticmethod
    def _with_entry(listing: JobListing, step: str, detail: str) -> list[dict]:
        log = [entry.model_dump() for entry in listing.apply_log]
        log.append(AuditLogEntry(step=step, detail=detail).model_dump())
        return log
