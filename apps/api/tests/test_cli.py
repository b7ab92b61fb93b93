"""Tests for the operator CLI."""

import uuid

from click.testing import CliRunner

from feedback_api.cli import cli
from feedback_api.db.enums import JobType
from feedback_api.services import form_service, job_service


def test_list_forms_empty(db):
    result = CliRunner().invoke(cli, ["list-forms"])
    assert result.exit_code == 0
    assert "No forms found" in result.output


def test_list_forms_shows_public_url(db, make_form):
    form = make_form()

    result = CliRunner().invoke(cli, ["list-forms"])

    assert result.exit_code == 0
    assert form.slug in result.output
    assert form_service.build_public_url(form.slug) in result.output


def test_delete_form(db, make_form):
    form_id = make_form().id

    result = CliRunner().invoke(cli, ["delete-form", "--form-id", str(form_id)])

    assert result.exit_code == 0, result.output
    assert form_service.get_form_for_dashboard(db, form_id) is None


def test_delete_unknown_form(db):
    result = CliRunner().invoke(cli, ["delete-form", "--form-id", str(uuid.uuid4())])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_delete_form_rejects_bad_id(db):
    result = CliRunner().invoke(cli, ["delete-form", "--form-id", "abc"])
    assert result.exit_code == 2


def test_run_jobs_without_pending_jobs(db):
    result = CliRunner().invoke(cli, ["run-jobs"])
    assert result.exit_code == 0
    assert "Processed 0 job(s)" in result.output


def test_list_jobs_filters_by_status(db):
    job_service.schedule_job(
        db, JobType.FEEDBACK_WEBHOOK, payload={"url": "https://hooks.example.com/x"}
    )

    pending = CliRunner().invoke(cli, ["list-jobs", "--status", "pending"])
    failed = CliRunner().invoke(cli, ["list-jobs", "--status", "failed"])

    assert pending.exit_code == 0, pending.output
    assert "feedback_webhook" in pending.output
    assert "attempts=0/5" in pending.output
    assert "No jobs found" in failed.output
