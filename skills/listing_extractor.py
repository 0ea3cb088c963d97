"""Listing Extractor Skill - turns raw search hits into normalized job listings."""

import logging

from pydantic import ValidationError

from models import ExtractedListing, RawSearchResult

from .base_skill import BaseSkill, SkillContext, SkillResult

logger = logging.getLogger(__name__)

RESULT_CONTENT_CHARS = 600

EXTRACTION_SYSTEM_PROMPT = """You extract job listings from web search results.

For every result that is (or links to) a concrete job posting, return one listing with the hiring
company and the job title. Include url, description, location and salary_info when the result
states them. Skip results that are not job postings (news, blog posts, company home pages,
aggregated "top 10 jobs" pages without a concrete role).

Never invent a company or title that is not in the result text."""

EXTRACTION_TOOL = "extract_jobs"

EXTRACTION_SCHEMA = {
    "type": "object",
    "properties": {
        "jobs": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "company": {"type": "string"},
                    "title": {"type": "string"},
                    "url": {"type": "string"},
                    "description": {"type": "string"},
                    "location": {"type": "string"},
                    "salary_info": {"type": "string"},
                },
                "required": ["company", "title"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["jobs"],
    "additionalProperties": False,
}


class ListingExtractorSkill(BaseSkill):
    """Skill that extracts structured listings from one chunk of search results."""

    async def execute(self, context: SkillContext, results: list[RawSearchResult]) -> SkillResult:
        """Extract listings from a chunk of raw results.

        Args:
            context: Execution context; the profile steers relevance.
            results: Raw search results for this chunk.

        Returns:
            SkillResult with a list of ExtractedListing. Fails (never raises) on
            transport errors or when the response has no usable jobs array.
        """
        if not results:
            return SkillResult.ok([])

        try:
            raw = await self.client.complete_structured(
                system=EXTRACTION_SYSTEM_PROMPT,
                user=self._build_user_prompt(context, results),
                tool_name=EXTRACTION_TOOL,
                description="Extract structured job listings",
                schema=EXTRACTION_SCHEMA,
            )
        except Exception as e:
            logger.warning("Extraction call failed: %s: %s", type(e).__name__, e)
            return SkillResult.fail(f"Extraction call failed: {e}")

        jobs = raw.get("jobs") if isinstance(raw, dict) else None
        if not isinstance(jobs, list):
            logger.warning("Extraction response missing jobs array")
            return SkillResult.fail("Malformed extraction response")

        listings = []
        dropped = 0
        for item in jobs:
            try:
                listings.append(ExtractedListing.model_validate(_strip_blank(item)))
            except ValidationError:
                dropped += 1

        if dropped:
            logger.debug("Dropped %d malformed extracted listing(s)", dropped)

        return SkillResult.ok(listings, dropped=dropped)

    def _build_user_prompt(self, context: SkillContext, results: list[RawSearchResult]) -> str:
        blocks = []
        for i, result in enumerate(results, 1):
            blocks.append(
                f"--- Result {i} ---\n"
                f"URL: {result.url or 'N/A'}\n"
                f"Title: {result.title or 'N/A'}\n"
                f"Content: {result.content[:RESULT_CONTENT_CHARS]}"
            )

        profile = context.profile
        if profile:
            header = (
                f"Target titles: {', '.join(profile.target_titles) or 'Any'}\n"
                f"Skills: {', '.join(profile.skills) or 'Not specified'}\n"
                f"Location: {profile.location_preference.value}\n"
                f"Experience: {profile.experience_level.value}"
            )
        else:
            header = "Target titles: Any"

        return (
            "Extract job listings from these search results.\n"
            f"{header}\n\n" + "\n\n".join(blocks)
        )


def _strip_blank(item):
    """Trim strings and turn empty optional fields into None."""
    if not isinstance(item, dict):
        return item
    cleaned = {}
    for key, value in item.items():
        if isinstance(value, str):
            value = value.strip() or None
        cleaned[key] = value
    return cleaned
