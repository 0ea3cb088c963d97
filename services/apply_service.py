"""Apply service - tailored resume and cover letter generation for approved listings."""

import logging

from models import CandidateProfile, JobListing, ListingStatus
from skills import DocumentGeneratorSkill, SkillContext

from .base_service import BaseService
from .exceptions import GenerationFailedError
from .models import ApplyJobResult, ApplyResult
from .profile_service import load_resume_text

logger = logging.getLogger(__name__)


class ApplyService(BaseService):
    """Service that moves approved listings through document generation.

    Listings are processed one at a time. A failure marks that listing failed
    and processing moves on to the next one.
    """

    async def check_ready(self, user_id: str) -> CandidateProfile:
        """Fail fast on a missing profile or completion key. Returns the profile."""
        profile = await self._require_profile(user_id)
        self._require_credentials()
        return profile

    async def run_apply(self, user_id: str, job_ids: list[str] | None = None) -> ApplyResult:
        """Generate documents for a user's approved listings.

        Args:
            user_id: Owner of the listings.
            job_ids: Optional subset of listing IDs. IDs that are not currently
                approved are skipped silently.

        Returns:
            ApplyResult with one entry per processed listing. success is True
            even when individual listings fail.

        Raises:
            ProfileNotFoundError: If the user has no profile.
            ConfigurationError: If completion credentials are missing.
        """
        profile = await self.check_ready(user_id)
        generator = DocumentGeneratorSkill(self.client)
        self.client.reset_token_usage()

        selected = await self._select(user_id, job_ids, profile.max_applications_per_run)
        if not selected:
            return ApplyResult(success=True, message="No approved listings to process")

        logger.info("Generating documents for %d listing(s)", len(selected))

        context = self._context(profile)
        resume_text = load_resume_text(profile)

        results = []
        for listing in selected:
            outcome = await self._process(user_id, context, generator, listing, resume_text)
            if outcome is not None:
                results.append(outcome)

        successful = sum(1 for r in results if r.status == ListingStatus.READY_TO_APPLY)
        failed = len(results) - successful
        logger.info("Document generation finished: %d ready, %d failed", successful, failed)
        self._log_token_usage("Document generation")

        return ApplyResult(
            success=True,
            jobs_processed=len(results),
            successful=successful,
            failed=failed,
            results=results,
            message=f"Generated documents for {successful} of {len(results)} job(s)",
        )

    async def _select(
        self, user_id: str, job_ids: list[str] | None, cap: int
    ) -> list[JobListing]:
        """Approved listings, highest score first, optionally restricted to job_ids."""
        approved = await self.listings.get_listings(user_id, status=ListingStatus.APPROVED)
        if job_ids is not None:
            wanted = set(job_ids)
            approved = [listing for listing in approved if listing.id in wanted]
        return approved[:cap]

    async def _process(
        self,
        user_id: str,
        context: SkillContext,
        generator: DocumentGeneratorSkill,
        listing: JobListing,
        resume_text: str | None,
    ) -> ApplyJobResult | None:
        """Generate documents for one listing.

        Returns None when the listing left the approved state after selection;
        it is skipped without touching its status.
        """
        try:
            current = await self.pipeline.transition(
                user_id,
                listing.id,
                ListingStatus.GENERATING_DOCS,
                detail="Generating tailored resume and cover letter",
            )
        except Exception as e:
            # Still approved; nothing to roll back
            error = str(e) or type(e).__name__
            logger.error("Could not start document generation for %s: %s", listing.id, error)
            return self._result(listing, ListingStatus.FAILED, error)

        if current is None:
            logger.info("Skipping %s: no longer approved", listing.id)
            return None

        try:
            result = await generator.execute(context, current, resume_text=resume_text)
            if not result.success:
                raise GenerationFailedError("Document generation", result.error)

            documents = result.data
            updated = await self.pipeline.transition(
                user_id,
                listing.id,
                ListingStatus.READY_TO_APPLY,
                step="ready",
                detail=(
                    f"Resume ({len(documents.resume)} chars) and cover letter "
                    f"({len(documents.cover_letter)} chars) generated"
                ),
                tailored_resume_text=documents.resume,
                cover_letter_text=documents.cover_letter,
            )
            if updated is None:
                raise GenerationFailedError("Status update", "could not store documents")

        except Exception as e:
            error = str(e) or type(e).__name__
            logger.error("Document generation failed for %s: %s", listing.id, error)
            await self._mark_failed(user_id, listing.id, error)
            return self._result(listing, ListingStatus.FAILED, error)

        return self._result(listing, ListingStatus.READY_TO_APPLY)

    @staticmethod
    def _result(
        listing: JobListing, status: ListingStatus, error: str | None = None
    ) -> ApplyJobResult:
        return ApplyJobResult(
            id=listing.id,
            company=listing.company,
            title=listing.title,
            status=status,
            error=error,
        )

    async def _mark_failed(self, user_id: str, listing_id: str, error: str) -> None:
        try:
            updated = await self.pipeline.transition(
                user_id, listing_id, ListingStatus.FAILED, step="failed", detail=error
            )
        except Exception as e:
            logger.error("Could not mark %s failed: %s", listing_id, e)
            return

        if updated is None:
            logger.error("Could not mark %s failed: transition rejected", listing_id)
