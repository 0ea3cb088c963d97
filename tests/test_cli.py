"""Tests for the jobhunt command line."""

import json

import pytest
from click.testing import CliRunner

from jobhunt import _slugify, cli


@pytest.fixture
def runner(tmp_data_dir, monkeypatch):
    monkeypatch.setenv("JOBHUNT_DATA_DIR", str(tmp_data_dir))
    return CliRunner()


@pytest.fixture
def seeded(populated_store):
    return populated_store


def invoke(runner, user_id, *args):
    return runner.invoke(cli, ["--user", user_id, *args], catch_exceptions=False)


def test_slugify():
    assert _slugify("Globex - Backend Engineer (Remote)") == "globex-backend-engineer-remote"
    assert _slugify("!!!") == "document"


class TestProfileCommand:
    def test_missing_profile(self, runner, user_id):
        result = invoke(runner, user_id, "profile")
        assert result.exit_code == 0
        assert "No candidate profile found" in result.output

    def test_set_file(self, runner, user_id, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"target_titles": ["Data Engineer"], "skills": ["SQL"]}))

        result = invoke(runner, user_id, "profile", "--set-file", str(path))

        assert result.exit_code == 0
        assert "Profile saved" in result.output
        assert "Data Engineer" in result.output

    def test_set_file_invalid(self, runner, user_id, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"min_salary": -5}))

        result = invoke(runner, user_id, "profile", "--set-file", str(path))
        assert "Invalid profile" in result.output


class TestListingCommands:
    def test_jobs(self, runner, user_id, seeded):
        result = invoke(runner, user_id, "jobs", "--status", "approved")
        assert result.exit_code == 0
        assert "Initech" in result.output
        assert "Globex" not in result.output

    def test_jobs_empty(self, runner, user_id):
        result = invoke(runner, user_id, "jobs")
        assert "No jobs found" in result.output

    def test_counts(self, runner, user_id, seeded):
        result = invoke(runner, user_id, "counts")
        assert "3 total" in result.output

    def test_status_change(self, runner, user_id, seeded, data_store):
        result = invoke(runner, user_id, "status", "JOB-GLOBEX-AAA111", "skipped", "--note", "No")
        assert result.exit_code == 0
        assert "Updated" in result.output

    def test_status_invalid_transition(self, runner, user_id, seeded):
        result = invoke(runner, user_id, "status", "JOB-GLOBEX-AAA111", "applied")
        assert "Cannot move" in result.output
        assert "Allowed from pending" in result.output

    def test_status_view(self, runner, user_id, seeded):
        result = invoke(runner, user_id, "status", "JOB-HOOLI-CCC333")
        assert "Current status" in result.output
        assert "Can move to" in result.output

    def test_note_without_status(self, runner, user_id, seeded, data_store):
        result = invoke(runner, user_id, "status", "JOB-GLOBEX-AAA111", "--note", "Recruiter call")
        assert result.exit_code == 0
        assert "Note added" in result.output

        result = invoke(runner, user_id, "status", "JOB-GLOBEX-AAA111")
        assert "Current status: pending" in result.output
        assert "Audit Log" in result.output
        assert "Recruiter call" in result.output

    def test_unknown_job(self, runner, user_id, seeded):
        result = invoke(runner, user_id, "status", "JOB-NOPE")
        assert "Job not found" in result.output


class TestDocsCommand:
    def test_no_documents_yet(self, runner, user_id, seeded):
        result = invoke(runner, user_id, "docs", "JOB-INITECH-BBB222")
        assert "No documents yet" in result.output

    def test_export(self, runner, user_id, tmp_data_dir, make_listing, write_listings, tmp_path):
        write_listings(user_id, [
            make_listing(
                user_id,
                "JOB-INITECH-BBB222",
                "Initech",
                "Platform Engineer",
                status="ready_to_apply",
                tailored_resume_text="# Resume",
                cover_letter_text="Dear Initech,",
            )
        ])
        out = tmp_path / "out"

        result = invoke(runner, user_id, "docs", "JOB-INITECH-BBB222", "--export", str(out))

        assert result.exit_code == 0
        assert (out / "initech-platform-engineer-resume.md").read_text() == "# Resume"
        assert (out / "initech-platform-engineer-cover-letter.md").read_text() == "Dear Initech,"


def test_api_key_is_stable(runner, user_id):
    first = invoke(runner, user_id, "api-key").output
    second = invoke(runner, user_id, "api-key").output
    assert "API Key:" in first
    assert first == second
