"""Tests for the exclusion filter."""

from models import CandidateProfile, ExtractedListing
from skills.listing_filter import filter_listings, is_excluded


def _listing(company, title="Backend Engineer", description=None):
    return ExtractedListing(company=company, title=title, description=description)


class TestIsExcluded:
    """Tests for is_excluded()."""

    def test_company_substring_case_insensitive(self):
        assert is_excluded(_listing("ACME Corporation"), ["acme"], [])

    def test_keyword_in_title(self):
        assert is_excluded(_listing("Globex", title="Senior Sales Engineer"), [], ["sales"])

    def test_keyword_in_description(self):
        listing = _listing("Globex", description="Requires an active Security Clearance")
        assert is_excluded(listing, [], ["security clearance"])

    def test_keyword_not_matched_against_company(self):
        assert not is_excluded(_listing("Sales Force Inc"), [], ["sales"])

    def test_no_match(self):
        assert not is_excluded(_listing("Globex"), ["Acme"], ["sales"])

    def test_blank_rules_match_nothing(self):
        assert not is_excluded(_listing("Globex"), ["", "  "], [""])


class TestFilterListings:
    """Tests for filter_listings()."""

    def test_removes_matches_and_keeps_others_unchanged(self):
        profile = CandidateProfile(
            user_id="u", excluded_companies=["Acme"], keyword_blacklist=["intern"]
        )
        globex = _listing("Globex", description="Python backend role")
        listings = [_listing("Acme"), globex, _listing("Initech", title="Backend Intern")]

        result = filter_listings(listings, profile)

        assert result == [globex]
        assert result[0] is globex

    def test_empty_rules_keep_everything(self):
        profile = CandidateProfile(user_id="u")
        listings = [_listing("Acme"), _listing("Globex")]
        assert filter_listings(listings, profile) == listings
