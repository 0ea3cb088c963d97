"""Company Researcher Skill - short company description for top-scoring listings."""

import logging

from claude_client import CompletionClient
from search_client import SearchClient

from .base_skill import BaseSkill, SkillContext, SkillResult

logger = logging.getLogger(__name__)

RESEARCH_RESULTS = 3
RESEARCH_CONTENT_CHARS = 1200

RESEARCH_SYSTEM_PROMPT = """You are a company research analyst helping with a job search.

From the search results provided, write a 1-2 sentence description of the company: what it does,
its industry, and its stage or size when stated. Use only facts from the results. If the results
do not describe the company, return an empty summary rather than guessing."""

RESEARCH_TOOL = "summarize_company"

RESEARCH_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string", "description": "1-2 sentence company description"},
    },
    "required": ["summary"],
    "additionalProperties": False,
}


class CompanyResearcherSkill(BaseSkill):
    """Skill that runs one search plus one summarization for a company."""

    def __init__(self, client: CompletionClient, search: SearchClient):
        super().__init__(client)
        self.search = search

    async def execute(self, context: SkillContext, company: str) -> SkillResult:
        """Research a company.

        Args:
            context: Execution context.
            company: Company name as extracted from the listing.

        Returns:
            SkillResult with the summary string, or fail() when either call
            fails or the summary comes back empty.
        """
        try:
            results = await self.search.search(f"{company} company overview", limit=RESEARCH_RESULTS)
        except Exception as e:
            logger.warning("Company search failed for %s: %s", company, e)
            return SkillResult.fail(f"Company search failed: {e}")

        if not results:
            return SkillResult.fail(f"No search results for {company}")

        content = "\n\n".join(
            f"URL: {r.url or 'N/A'}\nTitle: {r.title or 'N/A'}\n{r.content[:RESEARCH_CONTENT_CHARS]}"
            for r in results
        )

        try:
            raw = await self.client.complete_structured(
                system=RESEARCH_SYSTEM_PROMPT,
                user=f"Company: {company}\n\nSearch results:\n\n{content}",
                tool_name=RESEARCH_TOOL,
                description="Summarize a company in 1-2 sentences",
                schema=RESEARCH_SCHEMA,
                max_tokens=512,
            )
        except Exception as e:
            logger.warning("Company summary failed for %s: %s", company, e)
            return SkillResult.fail(f"Company summary failed: {e}")

        summary = raw.get("summary") if isinstance(raw, dict) else None
        if not isinstance(summary, str) or not summary.strip():
            return SkillResult.fail(f"Empty summary for {company}")

        return SkillResult.ok(summary.strip())
