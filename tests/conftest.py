"""Shared test fixtures for Job Hunt tests."""

import json

import pytest

from claude_client import CompletionClient
from config_loader import Settings
from data_store import DataStore, compute_duplicate_hash
from models import RawSearchResult
from pipeline_store import PipelineStore
from search_client import SearchClient

USER_ID = "user-1"


class FakeSearchClient(SearchClient):
    """Search client returning canned results per query (or the default list)."""

    source_tag = "fake"

    def __init__(self, results=None, by_query=None, fail_queries=()):
        self.results = results or []
        self.by_query = by_query or {}
        self.fail_queries = set(fail_queries)
        self.queries = []

    async def search(self, query, limit=None):
        self.queries.append((query, limit))
        if query in self.fail_queries:
            raise RuntimeError(f"search failed for {query}")
        return list(self.by_query.get(query, self.results))


class FakeCompletionClient(CompletionClient):
    """Completion client answering per tool name.

    A response may be a dict, an exception instance (raised), or a callable
    taking the user prompt and returning either.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    async def complete_structured(self, system, user, tool_name, description, schema, max_tokens=None):
        self.calls.append({"tool_name": tool_name, "system": system, "user": user})
        response = self.responses.get(tool_name)
        if callable(response) and not isinstance(response, Exception):
            response = response(user)
        if isinstance(response, Exception):
            raise response
        if response is None:
            raise ValueError(f"No {tool_name} tool call in response")
        return response

    def calls_for(self, tool_name):
        return [c for c in self.calls if c["tool_name"] == tool_name]


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def tmp_data_dir(tmp_path):
    """Create a temporary data directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def test_settings(tmp_data_dir):
    """Settings pointing at the temporary data directory, with fake keys."""
    return Settings(
        anthropic_api_key="test-anthropic-key",
        search_api_key="test-search-key",
        data_dir=tmp_data_dir,
    )


@pytest.fixture
def data_store(test_settings):
    """Create a DataStore using the temporary data directory."""
    return DataStore(test_settings)


@pytest.fixture
def pipeline_store(data_store):
    return PipelineStore(data_store)


@pytest.fixture
def fake_search():
    return FakeSearchClient()


@pytest.fixture
def fake_client():
    return FakeCompletionClient()


@pytest.fixture
def sample_profile(user_id):
    """Create a sample candidate profile dictionary."""
    return {
        "user_id": user_id,
        "target_titles": ["Backend Engineer"],
        "target_locations": ["Remote"],
        "target_companies": [],
        "industries": ["SaaS"],
        "skills": ["Python", "PostgreSQL", "AWS"],
        "excluded_companies": ["Acme"],
        "keyword_blacklist": [],
        "location_preference": "remote",
        "experience_level": "senior",
        "min_salary": 150000,
        "max_applications_per_run": 15,
        "notes": None,
        "resume_text": "# Test User\n\nBackend engineer, 8 years of Python.",
        "resume_path": None,
        "updated_at": "2026-01-01T00:00:00+00:00",
    }


def _make_listing(user_id, listing_id, company, title, location="Remote", score=70, status="pending", **extra):
    """Build a stored listing dictionary."""
    listing = {
        "id": listing_id,
        "user_id": user_id,
        "company": company,
        "title": title,
        "url": f"https://jobs.example.com/{listing_id.lower()}",
        "description": f"{company} is hiring a {title}.",
        "location": location,
        "salary_info": None,
        "company_summary": None,
        "score": score,
        "status": status,
        "source": "fake",
        "duplicate_hash": compute_duplicate_hash(company, title, location),
        "tailored_resume_text": None,
        "cover_letter_text": None,
        "apply_log": [],
        "created_at": "2026-01-15T00:00:00+00:00",
        "updated_at": "2026-01-15T00:00:00+00:00",
    }
    listing.update(extra)
    return listing


@pytest.fixture
def sample_listings(user_id):
    return [
        _make_listing(user_id, "JOB-GLOBEX-AAA111", "Globex", "Backend Engineer", score=75),
        _make_listing(user_id, "JOB-INITECH-BBB222", "Initech", "Platform Engineer", score=88, status="approved"),
        _make_listing(user_id, "JOB-HOOLI-CCC333", "Hooli", "Senior Backend Engineer", score=64, status="approved"),
    ]


def _write_profiles(data_dir, *profiles):
    """Write profiles straight to the profile store file."""
    data = {"profiles": {p["user_id"]: p for p in profiles}, "updated_at": "2026-01-01T00:00:00+00:00"}
    with open(data_dir / "profiles.json", "w") as f:
        json.dump(data, f)


def _write_listings(data_dir, user_id, listings):
    """Write listings straight to the user's listing file."""
    data = {"listings": listings, "updated_at": "2026-01-15T00:00:00+00:00"}
    with open(data_dir / f"listings-{user_id}.json", "w") as f:
        json.dump(data, f)


@pytest.fixture
def populated_store(data_store, tmp_data_dir, user_id, sample_profile, sample_listings):
    """Populate the store with one profile and three listings."""
    _write_profiles(tmp_data_dir, sample_profile)
    _write_listings(tmp_data_dir, user_id, sample_listings)
    return data_store


@pytest.fixture
def raw_results():
    return [
        RawSearchResult(
            url="https://jobs.example.com/acme-1",
            title="Backend Engineer - Acme",
            markdown="Acme is hiring a Backend Engineer (Remote).",
        ),
        RawSearchResult(
            url="https://jobs.example.com/globex-1",
            title="Backend Engineer - Globex",
            description="Globex Backend Engineer, remote, Python.",
        ),
    ]


@pytest.fixture
def make_listing():
    """Factory for stored listing dictionaries."""
    return _make_listing


@pytest.fixture
def write_listings(tmp_data_dir):
    """Write a user's listings straight to the store file."""

    def _write(user_id, listings):
        _write_listings(tmp_data_dir, user_id, listings)

    return _write


@pytest.fixture
def write_profiles(tmp_data_dir):
    """Write profiles straight to the store file."""

    def _write(*profiles):
        _write_profiles(tmp_data_dir, *profiles)

    return _write
