"""Document Generator Skill - tailored resume and cover letter for one listing."""

import logging
from dataclasses import dataclass

from models import CandidateProfile, JobListing

from .base_skill import BaseSkill, SkillContext, SkillResult

logger = logging.getLogger(__name__)

JOB_DESCRIPTION_CHARS = 1500

DOCUMENTS_SYSTEM_PROMPT = """You are a professional career consultant. Generate a tailored resume and cover letter
for the candidate applying to a specific job.

Resume guidelines (recommended section structure, in Markdown):
- Name, target title and contact block
- Profile summary: 2-3 sentences aimed at this role
- Experience: reverse chronological, bullets reordered and reworded to lead with what this job asks for
- Education
- Skills: the job's keywords first, only skills the candidate actually has

Cover letter guidelines:
- Professional and direct tone, 3-4 paragraphs maximum
- Opening: why this company and role
- Middle: 2-3 key qualifications with specific examples from the resume
- Closing: call to action

Do NOT invent experiences, employers, degrees or metrics that are not in the candidate profile."""

DOCUMENTS_TOOL = "generate_application_docs"

DOCUMENTS_SCHEMA = {
    "type": "object",
    "properties": {
        "tailored_resume": {
            "type": "string",
            "description": "Full tailored resume text, formatted with sections",
        },
        "cover_letter": {
            "type": "string",
            "description": "Full cover letter text, personalized for the company and role",
        },
    },
    "required": ["tailored_resume", "cover_letter"],
    "additionalProperties": False,
}


@dataclass
class ApplicationDocuments:
    """Result of document generation."""

    resume: str
    """Tailored resume text."""

    cover_letter: str
    """Tailored cover letter text."""


class DocumentGeneratorSkill(BaseSkill):
    """Skill that writes both application documents in one structured call."""

    async def execute(
        self,
        context: SkillContext,
        listing: JobListing,
        resume_text: str | None = None,
    ) -> SkillResult:
        """Generate a resume and cover letter for a listing.

        Args:
            context: Execution context; requires the candidate profile.
            listing: The approved listing.
            resume_text: Candidate's base resume text, if any.

        Returns:
            SkillResult with ApplicationDocuments. Fails when the call fails or
            either document comes back empty.
        """
        try:
            raw = await self.client.complete_structured(
                system=DOCUMENTS_SYSTEM_PROMPT,
                user=self._build_user_prompt(context.profile, listing, resume_text),
                tool_name=DOCUMENTS_TOOL,
                description="Generate tailored resume and cover letter",
                schema=DOCUMENTS_SCHEMA,
                max_tokens=8192,
            )
        except Exception as e:
            return SkillResult.fail(f"{type(e).__name__}: {e}")

        if not isinstance(raw, dict):
            return SkillResult.fail("Malformed document response")

        resume = raw.get("tailored_resume")
        cover_letter = raw.get("cover_letter")
        if not isinstance(resume, str) or not resume.strip():
            return SkillResult.fail("Model returned an empty resume")
        if not isinstance(cover_letter, str) or not cover_letter.strip():
            return SkillResult.fail("Model returned an empty cover letter")

        return SkillResult.ok(
            ApplicationDocuments(resume=resume.strip(), cover_letter=cover_letter.strip())
        )

    def _build_user_prompt(
        self,
        profile: CandidateProfile | None,
        listing: JobListing,
        resume_text: str | None,
    ) -> str:
        if profile is None:
            raise ValueError("Document generation requires a candidate profile")

        description = (listing.description or "Not provided")[:JOB_DESCRIPTION_CHARS]

        return f"""Generate a tailored resume and cover letter for this application.

CANDIDATE PROFILE:
- Resume: {resume_text or "Not provided"}
- Skills: {", ".join(profile.skills) or "Not specified"}
- Target Titles: {", ".join(profile.target_titles) or "Not specified"}
- Industries: {", ".join(profile.industries) or "Not specified"}
- Experience Level: {profile.experience_level.value}
- Location Preference: {profile.location_preference.value}
- Notes: {profile.notes or "None"}

JOB DETAILS:
- Company: {listing.company}
- About the company: {listing.company_summary or "Not provided"}
- Title: {listing.title}
- Location: {listing.location or "Not specified"}
- Description: {description}
- Salary: {listing.salary_info or "Not specified"}"""
