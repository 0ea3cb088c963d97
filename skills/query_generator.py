"""Search query generation from a candidate profile.

Pure functions: titles x locations first, then job-board site filters, then
sampled company-careers queries, truncated to a cap in that priority order.
"""

import random

from config_loader import Settings
from models import CandidateProfile

DEFAULT_TITLES = [
    "AI Product Manager",
    "Technical Product Manager",
    "AI Solutions Consultant",
    "LLM Engineer",
    "AI Developer",
    "Full Stack Developer AI",
    "Digital Transformation Manager",
    "Generative AI Product Manager",
]

DEFAULT_LOCATIONS = [
    "Remote",
    "Toronto Canada",
    "Vancouver Canada",
    "Dubai UAE",
    "Riyadh Saudi Arabia",
]

JOB_BOARD_SITES = [
    "site:greenhouse.io",
    "site:lever.co",
    "site:wellfound.com",
    "site:glassdoor.com",
    "site:workable.com",
    "site:bayt.com",
    "site:gulftalent.com",
]

DEFAULT_COMPANIES = [
    "Anthropic", "OpenAI", "Cohere", "Scale AI", "Hugging Face", "Mistral",
    "Perplexity", "Together AI", "Vercel", "Supabase", "Replit", "Linear",
    "Notion", "Zapier", "Shopify", "Careem", "Talabat", "G42", "Noon", "Tabby",
]


def generate_queries(
    titles: list[str],
    locations: list[str],
    companies: list[str] | None = None,
    max_queries: int = 80,
    max_titles: int = 6,
    max_locations: int = 7,
    site_filter_titles: int = 4,
    company_query_count: int = 20,
    rng: random.Random | None = None,
) -> list[str]:
    """Build a capped list of search-engine query strings.

    Empty titles or locations fall back to the built-in defaults, so the result
    always holds at least one query when max_queries > 0.

    Args:
        titles: Target job titles, most important first.
        locations: Target locations.
        companies: Companies for careers-page queries (default list if empty).
        max_queries: Hard cap on the number of queries returned.
        max_titles: Prefix of titles used for title x location pairs.
        max_locations: Prefix of locations used for title x location pairs.
        site_filter_titles: Prefix of titles combined with job-board filters.
        company_query_count: Number of companies sampled for careers queries.
        rng: Random source for company sampling.

    Returns:
        Query strings in priority order.
    """
    titles = _clean(titles) or list(DEFAULT_TITLES)
    locations = _clean(locations) or list(DEFAULT_LOCATIONS)
    companies = _clean(companies or []) or list(DEFAULT_COMPANIES)
    rng = rng or random.Random()

    queries: list[str] = []

    for title in titles[:max_titles]:
        for location in locations[:max_locations]:
            queries.append(f"{title} {location} job")

    for title in titles[:site_filter_titles]:
        for site in JOB_BOARD_SITES:
            queries.append(f"{title} {site}")

    main_title = titles[0]
    sampled = rng.sample(companies, k=min(company_query_count, len(companies)))
    for company in sampled:
        queries.append(f'"{company}" careers {main_title}')

    return _unique(queries)[:max_queries]


def generate_profile_queries(
    profile: CandidateProfile,
    settings: Settings,
    rng: random.Random | None = None,
) -> list[str]:
    """generate_queries() driven by a profile and the configured caps."""
    return generate_queries(
        profile.target_titles,
        profile.target_locations,
        profile.target_companies,
        max_queries=settings.max_queries,
        max_titles=settings.max_query_titles,
        max_locations=settings.max_query_locations,
        site_filter_titles=settings.site_filter_titles,
        company_query_count=settings.company_query_count,
        rng=rng,
    )


def _clean(values: list[str]) -> list[str]:
    return [value.strip() for value in values if value and value.strip()]


def _unique(queries: list[str]) -> list[str]:
    seen = set()
    result = []
    for query in queries:
        key = query.lower()
        if key not in seen:
            seen.add(key)
            result.append(query)
    return result
