"""Exclusion filter for extracted listings."""

from models import CandidateProfile, ExtractedListing


def _matchers(values: list[str]) -> list[str]:
    # Blank entries would match everything
    return [value.strip().lower() for value in values if value and value.strip()]


def is_excluded(
    listing: ExtractedListing,
    excluded_companies: list[str],
    keyword_blacklist: list[str],
) -> bool:
    """True if the company contains an excluded name, or the title+description
    contains a blacklisted keyword (case-insensitive substring matches)."""
    company = listing.company.lower()
    if any(name in company for name in _matchers(excluded_companies)):
        return True

    text = f"{listing.title} {listing.description or ''}".lower()
    return any(keyword in text for keyword in _matchers(keyword_blacklist))


def filter_listings(
    listings: list[ExtractedListing],
    profile: CandidateProfile,
) -> list[ExtractedListing]:
    """Drop listings matching the profile's exclusions; others pass unchanged."""
    return [
        listing
        for listing in listings
        if not is_excluded(listing, profile.excluded_companies, profile.keyword_blacklist)
    ]
