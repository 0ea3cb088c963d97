"""Shared fixtures for API tests."""

import time

import pytest
from fastapi.testclient import TestClient

from api import dependencies as deps
from api.app import create_app
from api.auth import get_or_create_api_key


@pytest.fixture
def api_key(test_settings, user_id):
    """A real key for the test user, written to the data directory."""
    return get_or_create_api_key(test_settings, user_id)


@pytest.fixture
def auth_headers(api_key):
    """Headers with API key."""
    return {"X-API-Key": api_key}


@pytest.fixture
def app(test_settings, data_store, pipeline_store, fake_client, fake_search, tmp_data_dir, monkeypatch):
    """Create a FastAPI test app with injected dependencies."""
    # Startup reads settings directly, so point it at the temp data dir too
    monkeypatch.setenv("JOBHUNT_DATA_DIR", str(tmp_data_dir))
    deps.reset_singletons()

    def _service_kwargs():
        return {
            "settings": test_settings,
            "data_store": data_store,
            "pipeline": pipeline_store,
            "client": fake_client,
            "search": fake_search,
        }

    application = create_app()

    overrides = application.dependency_overrides
    overrides[deps.get_settings] = lambda: test_settings
    overrides[deps.get_data_store] = lambda: data_store
    overrides[deps.get_pipeline_store] = lambda: pipeline_store
    overrides[deps.get_scan_service] = lambda: deps.ScanService(**_service_kwargs())
    overrides[deps.get_apply_service] = lambda: deps.ApplyService(**_service_kwargs())
    overrides[deps.get_job_service] = lambda: deps.JobService(**_service_kwargs())
    overrides[deps.get_profile_service] = lambda: deps.ProfileService(**_service_kwargs())

    yield application

    deps.reset_singletons()


@pytest.fixture
def client(app):
    """Create a test client with the app's lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def wait_for_task(client, auth_headers):
    """Poll a background task until it leaves the running state."""

    def _wait(task_id, timeout=5.0):
        deadline = time.monotonic() + timeout
        while True:
            body = client.get(f"/api/v1/tasks/{task_id}", headers=auth_headers).json()
            if body["status"] != "running" or time.monotonic() > deadline:
                return body
            time.sleep(0.01)

    return _wait
