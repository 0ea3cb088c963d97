"""Listing Scorer Skill - 0-100 fit score per listing against the candidate profile."""

import logging
import math

from models import CandidateProfile, ExtractedListing

from .base_skill import BaseSkill, SkillContext, SkillResult

logger = logging.getLogger(__name__)

# Listings scoring below this are not persisted
SCORE_THRESHOLD = 60

# Assigned when the model gives no usable score for a listing
DEFAULT_SCORE = 50

DESCRIPTION_CHARS = 300

SCORING_SYSTEM_PROMPT = """You are a recruiter scoring job listings for one candidate.

Score each job 0-100 for how well it fits the candidate: title and seniority match, required
skills, location fit, and salary against the candidate's minimum when both are known.
90+ is an excellent match, 60-89 worth applying, below 60 a poor fit.

Return a score for ALL jobs, using the job index shown in the list."""

SCORING_TOOL = "score_jobs_batch"

SCORING_SCHEMA = {
    "type": "object",
    "properties": {
        "jobs": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "index": {"type": "number"},
                    "score": {"type": "number"},
                    "reasoning": {"type": "string"},
                },
                "required": ["index", "score"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["jobs"],
    "additionalProperties": False,
}


def clamp_score(value) -> int | None:
    """Round half-up and clamp to [0, 100]. None for non-numeric values."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return min(100, max(0, math.floor(value + 0.5)))


def scores_from_response(raw, count: int) -> list[int]:
    """Map a scoring response back to input order.

    Every index in range(count) gets a score; indexes missing from the
    response, or carrying a non-numeric score, get DEFAULT_SCORE.
    """
    by_index: dict[int, int] = {}
    entries = raw.get("jobs") if isinstance(raw, dict) else None

    for entry in entries if isinstance(entries, list) else []:
        if not isinstance(entry, dict):
            continue
        index = entry.get("index")
        if isinstance(index, bool) or not isinstance(index, (int, float)):
            continue
        if not math.isfinite(index) or index != int(index):
            continue
        score = clamp_score(entry.get("score"))
        if score is not None and int(index) not in by_index:
            by_index[int(index)] = score

    return [by_index.get(i, DEFAULT_SCORE) for i in range(count)]


class ListingScorerSkill(BaseSkill):
    """Skill that scores one chunk of filtered listings."""

    async def execute(self, context: SkillContext, listings: list[ExtractedListing]) -> SkillResult:
        """Score a chunk of listings.

        Args:
            context: Execution context; requires the candidate profile.
            listings: Listings in this chunk.

        Returns:
            SkillResult whose data is a list of int scores aligned with listings.
            Always carries a score for every listing; on a failed call every
            listing gets DEFAULT_SCORE and the result is marked failed.
        """
        if not listings:
            return SkillResult.ok([])

        try:
            raw = await self.client.complete_structured(
                system=SCORING_SYSTEM_PROMPT,
                user=self._build_user_prompt(context.profile, listings),
                tool_name=SCORING_TOOL,
                description="Score multiple jobs for candidate fit",
                schema=SCORING_SCHEMA,
            )
        except Exception as e:
            logger.warning("Scoring call failed, using default scores: %s: %s", type(e).__name__, e)
            return SkillResult(
                success=False,
                data=[DEFAULT_SCORE] * len(listings),
                error=f"Scoring call failed: {e}",
            )

        return SkillResult.ok(scores_from_response(raw, len(listings)))

    def _build_user_prompt(
        self, profile: CandidateProfile | None, listings: list[ExtractedListing]
    ) -> str:
        jobs_text = "\n\n".join(
            f"Job {i}: {job.title} at {job.company} | "
            f"Location: {job.location or 'Unknown'} | "
            f"Salary: {job.salary_info or 'N/A'} | "
            f"{(job.description or '')[:DESCRIPTION_CHARS]}"
            for i, job in enumerate(listings)
        )

        if profile is None:
            return jobs_text

        candidate = (
            f"Candidate: Titles: {', '.join(profile.target_titles) or 'Any'}"
            f" | Skills: {', '.join(profile.skills) or 'Not specified'}"
            f" | Industries: {', '.join(profile.industries) or 'Any'}"
            f" | Location: {profile.location_preference.value}"
            f" | Min salary: {f'${profile.min_salary:,.0f}' if profile.min_salary else 'N/A'}"
            f" | Level: {profile.experience_level.value}"
        )
        if profile.notes:
            candidate += f" | Notes: {profile.notes}"

        return f"{candidate}\n\n{jobs_text}"
