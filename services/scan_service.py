"""Scan service - discover, extract, filter, score, enrich and persist listings.

Stages run strictly in order; each stage reports its count even when a later
stage ends up saving nothing.
"""

import logging
import random

from data_store import compute_duplicate_hash, generate_listing_id
from models import (
    CandidateProfile,
    ExtractedListing,
    JobListing,
    ListingStatus,
    RawSearchResult,
    ScoredListing,
)
from skills import (
    DEFAULT_SCORE,
    SCORE_THRESHOLD,
    CompanyResearcherSkill,
    ListingExtractorSkill,
    ListingScorerSkill,
    SkillContext,
    filter_listings,
    generate_profile_queries,
)

from .base_service import BaseService
from .batch_runner import chunked, run_in_batches
from .models import ScanResult

logger = logging.getLogger(__name__)


class ScanService(BaseService):
    """Service running the full discovery pipeline for one user."""

    def __init__(self, *args, rng: random.Random | None = None, **kwargs):
        """Initialize the service.

        Args:
            rng: Random source for company query sampling (seeded in tests).
            *args, **kwargs: Passed to BaseService.
        """
        super().__init__(*args, **kwargs)
        self.rng = rng

    async def check_ready(self, user_id: str) -> CandidateProfile:
        """Fail fast on a missing profile or missing credentials.

        Returns:
            The user's profile.
        """
        profile = await self._require_profile(user_id)
        self._require_credentials(search=True)
        return profile

    async def run_scan(self, user_id: str) -> ScanResult:
        """Run one scan for a user.

        Args:
            user_id: Owner of the profile and of the saved listings.

        Returns:
            ScanResult with per-stage counters.

        Raises:
            ProfileNotFoundError: If the user has no profile.
            ConfigurationError: If search or completion credentials are missing.
        """
        profile = await self.check_ready(user_id)
        search = self.search
        client = self.client
        client.reset_token_usage()

        context = self._context(profile)
        result = ScanResult(success=True)

        queries = generate_profile_queries(profile, self.settings, rng=self.rng)
        result.queries_run = len(queries)
        logger.info("Generated %d search queries", len(queries))

        raw_results = await self._search_all(queries)
        result.raw_results = len(raw_results)
        logger.info("Search returned %d raw results", len(raw_results))

        extracted = await self._extract_all(context, raw_results, ListingExtractorSkill(client))
        result.jobs_extracted = len(extracted)
        logger.info("Extracted %d listings", len(extracted))

        filtered = filter_listings(extracted, profile)
        result.jobs_filtered = len(filtered)
        logger.info("%d listings left after exclusions", len(filtered))

        scored = await self._score_all(context, filtered, ListingScorerSkill(client))
        accepted = [item for item in scored if item.score >= SCORE_THRESHOLD]
        accepted.sort(key=lambda item: item.score, reverse=True)
        result.jobs_scored = len(accepted)
        logger.info("%d listings scored >= %d", len(accepted), SCORE_THRESHOLD)

        if self.settings.enrichment_enabled and self.settings.enrichment_top_n > 0 and accepted:
            result.jobs_enriched = await self._enrich(
                context, accepted, CompanyResearcherSkill(client, search)
            )
            logger.info("Enriched %d listings with company summaries", result.jobs_enriched)

        saved, duplicates = await self._persist(user_id, accepted, search.source_tag)
        result.jobs_saved = saved
        result.duplicates = duplicates
        logger.info("Saved %d new listings (%d duplicates skipped)", saved, duplicates)

        self._log_token_usage("Scan")
        result.message = self._summary_message(result)
        return result

    # =========================================================================
    # Stages
    # =========================================================================

    async def _search_all(self, queries: list[str]) -> list[RawSearchResult]:
        outcomes = await run_in_batches(
            queries, self.settings.search_batch_size, self.search.search
        )

        raw_results = []
        for outcome in outcomes:
            if outcome.success:
                raw_results.extend(outcome.value)
            else:
                logger.warning("Search failed for %r: %s", queries[outcome.index], outcome.error)
        return raw_results

    async def _extract_all(
        self,
        context: SkillContext,
        raw_results: list[RawSearchResult],
        extractor: ListingExtractorSkill,
    ) -> list[ExtractedListing]:
        chunks = list(chunked(raw_results, self.settings.extraction_chunk_size))

        async def extract(chunk):
            return await extractor.execute(context, chunk)

        outcomes = await run_in_batches(chunks, self.settings.extraction_concurrency, extract)

        extracted = []
        for outcome in outcomes:
            if not outcome.success:
                logger.warning("Extraction chunk %d raised: %s", outcome.index, outcome.error)
            elif not outcome.value.success:
                logger.warning("Extraction chunk %d failed: %s", outcome.index, outcome.value.error)
            else:
                extracted.extend(outcome.value.data)
        return extracted

    async def _score_all(
        self,
        context: SkillContext,
        listings: list[ExtractedListing],
        scorer: ListingScorerSkill,
    ) -> list[ScoredListing]:
        chunks = list(chunked(listings, self.settings.scoring_chunk_size))

        async def score(chunk):
            return await scorer.execute(context, chunk)

        outcomes = await run_in_batches(chunks, self.settings.scoring_concurrency, score)

        scored = []
        for outcome in outcomes:
            chunk = chunks[outcome.index]
            if outcome.success:
                if not outcome.value.success:
                    logger.warning("Scoring chunk %d failed: %s", outcome.index, outcome.value.error)
                scores = outcome.value.data
            else:
                logger.warning("Scoring chunk %d raised: %s", outcome.index, outcome.error)
                scores = [DEFAULT_SCORE] * len(chunk)

            scored.extend(
                ScoredListing(listing=listing, score=value)
                for listing, value in zip(chunk, scores)
            )
        return scored

    async def _enrich(
        self,
        context: SkillContext,
        accepted: list[ScoredListing],
        researcher: CompanyResearcherSkill,
    ) -> int:
        """Attach company summaries to listings of the top-N distinct companies.

        accepted must already be sorted by score, highest first.
        """
        companies: list[str] = []
        for item in accepted:
            name = item.listing.company
            if name.lower() not in {c.lower() for c in companies}:
                companies.append(name)
            if len(companies) >= self.settings.enrichment_top_n:
                break

        async def research(company):
            return await researcher.execute(context, company)

        outcomes = await run_in_batches(companies, self.settings.enrichment_concurrency, research)

        summaries: dict[str, str] = {}
        for outcome in outcomes:
            company = companies[outcome.index]
            if outcome.success and outcome.value.success:
                summaries[company.lower()] = outcome.value.data
            else:
                reason = outcome.error if not outcome.success else outcome.value.error
                logger.warning("No company summary for %s: %s", company, reason)

        enriched = 0
        for item in accepted:
            summary = summaries.get(item.listing.company.lower())
            if summary:
                item.company_summary = summary
                enriched += 1
        return enriched

    async def _persist(
        self, user_id: str, accepted: list[ScoredListing], source: str
    ) -> tuple[int, int]:
        """Insert novel listings one by one; a failed insert skips only that listing.

        Returns:
            (saved, duplicates)
        """
        saved = 0
        duplicates = 0

        for item in accepted:
            listing = self._to_job_listing(user_id, item, source)
            try:
                inserted = await self.listings.save_if_new(listing)
            except Exception as e:
                logger.error(
                    "Failed to save %s at %s: %s", listing.title, listing.company, e
                )
                continue

            if inserted:
                saved += 1
            else:
                duplicates += 1

        return saved, duplicates

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _to_job_listing(user_id: str, item: ScoredListing, source: str) -> JobListing:
        listing = item.listing
        return JobListing(
            id=generate_listing_id(listing.company),
            user_id=user_id,
            company=listing.company,
            title=listing.title,
            url=listing.url,
            description=listing.description,
            location=listing.location,
            salary_info=listing.salary_info,
            company_summary=item.company_summary,
            score=item.score,
            status=ListingStatus.PENDING,
            source=source,
            duplicate_hash=compute_duplicate_hash(listing.company, listing.title, listing.location),
        )

    @staticmethod
    def _summary_message(result: ScanResult) -> str:
        if result.jobs_saved:
            return f"Found {result.jobs_saved} new matching job(s)"
        if result.jobs_scored:
            return "No new jobs: every match was already saved"
        if result.jobs_extracted:
            return f"No listings scored {SCORE_THRESHOLD} or higher"
        if result.raw_results:
            return "Search results contained no extractable job listings"
        return "Search returned no results"


def describe_profile(profile: CandidateProfile) -> str:
    """One-line description of what a scan will search for."""
    titles = ", ".join(profile.target_titles[:3]) or "default titles"
    locations = ", ".join(profile.target_locations[:3]) or "default locations"
    return f"{titles} in {locations}"
