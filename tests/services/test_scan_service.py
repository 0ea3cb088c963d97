"""Tests for ScanService."""

import random

import pytest

from config_loader import Settings
from models import ListingStatus
from services.exceptions import ConfigurationError, ProfileNotFoundError
from services.scan_service import ScanService, describe_profile

EXTRACTED = {
    "jobs": [
        {"company": "Acme", "title": "Backend Engineer", "location": "Remote", "url": "https://jobs.example.com/acme-1"},
        {"company": "Globex", "title": "Backend Engineer", "location": "Remote", "url": "https://jobs.example.com/globex-1"},
    ]
}


@pytest.fixture
def scan_settings(test_settings):
    """One query per scan: no site filters, no company sampling, no enrichment."""
    return test_settings.model_copy(
        update={"site_filter_titles": 0, "company_query_count": 0, "enrichment_enabled": False}
    )


@pytest.fixture
def scan_store(data_store, write_profiles, sample_profile):
    write_profiles(sample_profile)
    return data_store


@pytest.fixture
def make_service(scan_settings, scan_store, fake_client, fake_search):
    def _make(settings=None, **kwargs):
        kwargs.setdefault("client", fake_client)
        kwargs.setdefault("search", fake_search)
        return ScanService(
            settings=settings or scan_settings,
            data_store=scan_store,
            rng=random.Random(0),
            **kwargs,
        )

    return _make


@pytest.fixture
def scored_clients(fake_client, fake_search, raw_results):
    fake_search.results = raw_results
    fake_client.responses["extract_jobs"] = EXTRACTED
    fake_client.responses["score_jobs_batch"] = {"jobs": [{"index": 0, "score": 75}]}
    return fake_client, fake_search


class TestRunScan:
    """Tests for run_scan()."""

    @pytest.mark.asyncio
    async def test_full_pipeline(self, make_service, scored_clients, scan_store, user_id):
        fake_client, fake_search = scored_clients

        result = await make_service().run_scan(user_id)

        assert result.success
        assert result.queries_run == 1
        assert fake_search.queries == [("Backend Engineer Remote job", None)]
        assert result.raw_results == 2
        assert result.jobs_extracted == 2
        assert result.jobs_filtered == 1
        assert result.jobs_scored == 1
        assert result.jobs_saved == 1
        assert result.duplicates == 0

        listings = await scan_store.get_listings(user_id)
        assert len(listings) == 1
        saved = listings[0]
        assert saved.company == "Globex"
        assert saved.score == 75
        assert saved.status == ListingStatus.PENDING
        assert saved.source == "fake"
        assert saved.id.startswith("JOB-GLOBEX-")

        # Excluded company never reaches scoring
        scoring_prompt = fake_client.calls_for("score_jobs_batch")[0]["user"]
        assert "Acme" not in scoring_prompt.split("\n\n", 1)[1]

    @pytest.mark.asyncio
    async def test_second_scan_counts_duplicates(self, make_service, scored_clients, scan_store, user_id):
        service = make_service()
        await service.run_scan(user_id)
        result = await service.run_scan(user_id)

        assert result.jobs_saved == 0
        assert result.duplicates == 1
        assert len(await scan_store.get_listings(user_id)) == 1

    @pytest.mark.asyncio
    async def test_scoring_failure_uses_default_score(self, make_service, scored_clients, scan_store, user_id):
        fake_client, _ = scored_clients
        fake_client.responses["score_jobs_batch"] = RuntimeError("rate limited")

        result = await make_service().run_scan(user_id)

        # Default score is below the save threshold
        assert result.jobs_filtered == 1
        assert result.jobs_scored == 0
        assert result.jobs_saved == 0
        assert await scan_store.get_listings(user_id) == []

    @pytest.mark.asyncio
    async def test_failed_search_is_skipped(self, make_service, fake_client, fake_search, user_id):
        fake_search.fail_queries = {"Backend Engineer Remote job"}

        result = await make_service().run_scan(user_id)

        assert result.success
        assert result.raw_results == 0
        assert result.jobs_saved == 0
        assert fake_client.calls == []
        assert result.message == "Search returned no results"

    @pytest.mark.asyncio
    async def test_extraction_failure_saves_nothing(self, make_service, scored_clients, user_id):
        fake_client, _ = scored_clients
        fake_client.responses["extract_jobs"] = {"unexpected": True}

        result = await make_service().run_scan(user_id)

        assert result.raw_results == 2
        assert result.jobs_extracted == 0
        assert result.jobs_saved == 0

    @pytest.mark.asyncio
    async def test_enrichment_attaches_summary(self, make_service, scored_clients, scan_settings, scan_store, user_id):
        fake_client, fake_search = scored_clients
        fake_client.responses["summarize_company"] = {"summary": "Globex builds industrial widgets."}
        settings = scan_settings.model_copy(update={"enrichment_enabled": True})

        result = await make_service(settings=settings).run_scan(user_id)

        assert result.jobs_enriched == 1
        assert ("Globex company overview", 3) in fake_search.queries
        saved = (await scan_store.get_listings(user_id))[0]
        assert saved.company_summary == "Globex builds industrial widgets."

    @pytest.mark.asyncio
    async def test_enrichment_failure_still_saves(self, make_service, scored_clients, scan_settings, scan_store, user_id):
        settings = scan_settings.model_copy(update={"enrichment_enabled": True})

        result = await make_service(settings=settings).run_scan(user_id)

        assert result.jobs_enriched == 0
        assert result.jobs_saved == 1
        saved = (await scan_store.get_listings(user_id))[0]
        assert saved.company_summary is None


class TestReadiness:
    """Tests for the failure modes checked before any work starts."""

    @pytest.mark.asyncio
    async def test_missing_profile(self, make_service, fake_search):
        with pytest.raises(ProfileNotFoundError):
            await make_service().run_scan("no-profile")
        assert fake_search.queries == []

    @pytest.mark.asyncio
    async def test_missing_keys(self, scan_store, tmp_data_dir, user_id):
        service = ScanService(settings=Settings(data_dir=tmp_data_dir), data_store=scan_store)

        with pytest.raises(ConfigurationError) as exc_info:
            await service.run_scan(user_id)
        assert exc_info.value.setting == "anthropic_api_key"

    @pytest.mark.asyncio
    async def test_missing_search_key(self, scan_store, tmp_data_dir, user_id, fake_client):
        service = ScanService(
            settings=Settings(data_dir=tmp_data_dir, anthropic_api_key="k"),
            data_store=scan_store,
            client=fake_client,
        )

        with pytest.raises(ConfigurationError) as exc_info:
            await service.check_ready(user_id)
        assert exc_info.value.setting == "search_api_key"


def test_describe_profile(sample_profile):
    from models import CandidateProfile

    profile = CandidateProfile.model_validate(sample_profile)
    assert describe_profile(profile) == "Backend Engineer in Remote"
    assert describe_profile(CandidateProfile(user_id="u")) == "default titles in default locations"
