"""Job hunt skills - stateless tools for specific operations."""

from .base_skill import BaseSkill, SkillContext, SkillResult
from .company_researcher import CompanyResearcherSkill
from .document_generator import ApplicationDocuments, DocumentGeneratorSkill
from .listing_extractor import ListingExtractorSkill
from .listing_filter import filter_listings, is_excluded
from .listing_scorer import DEFAULT_SCORE, SCORE_THRESHOLD, ListingScorerSkill
from .query_generator import generate_profile_queries, generate_queries

__all__ = [
    # Base
    "BaseSkill",
    "SkillContext",
    "SkillResult",
    # Skills
    "CompanyResearcherSkill",
    "DocumentGeneratorSkill",
    "ApplicationDocuments",
    "ListingExtractorSkill",
    "ListingScorerSkill",
    # Pure helpers
    "filter_listings",
    "is_excluded",
    "generate_queries",
    "generate_profile_queries",
    "DEFAULT_SCORE",
    "SCORE_THRESHOLD",
]
