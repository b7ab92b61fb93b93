"""CLI tools for feedback form administration."""

import asyncio
import uuid

import click

from feedback_api.db.enums import JobStatus
from feedback_api.db.session import SessionLocal
from feedback_api.services import form_service, job_service
from feedback_api.services.form_service import FormNotFoundError, PersistenceError


@click.group()
def cli():
    """Mail feedback CLI tools."""
    pass


@cli.command()
def list_forms():
    """
    List all forms, newest first.

    Example:
        python -m feedback_api.cli list-forms
    """
    db = SessionLocal()
    try:
        forms = form_service.list_forms(db)
        if not forms:
            click.echo("No forms found")
            return
        for form in forms:
            click.echo(
                f"{form.id}  {form.status:<9}  {form.slug}  "
                f"{form_service.build_public_url(form.slug)}"
            )
    finally:
        db.close()


@cli.command()
@click.option("--form-id", required=True, help="Form UUID")
def delete_form(form_id: str):
    """
    Delete a form together with its variants and feedback.

    Example:
        python -m feedback_api.cli delete-form --form-id 7d7c...
    """
    try:
        parsed_id = uuid.UUID(form_id)
    except ValueError:
        raise click.BadParameter("must be a UUID", param_hint="--form-id")

    db = SessionLocal()
    try:
        form_service.delete_form(db, parsed_id)
        click.echo(f"✓ Deleted form {parsed_id}")
    except FormNotFoundError:
        click.echo(f"❌ Form {parsed_id} not found")
        raise SystemExit(1)
    except PersistenceError as e:
        click.echo(f"❌ Error: {e}")
        raise SystemExit(1)
    finally:
        db.close()


@cli.command()
@click.option(
    "--status",
    type=click.Choice([s.value for s in JobStatus]),
    default=None,
    help="Only show jobs with this status",
)
@click.option("--limit", default=50, show_default=True, help="Max jobs to show")
def list_jobs(status: str | None, limit: int):
    """
    List webhook jobs, newest first.

    Example:
        python -m feedback_api.cli list-jobs --status failed
    """
    db = SessionLocal()
    try:
        jobs = job_service.list_jobs(
            db, status=JobStatus(status) if status else None, limit=limit
        )
        if not jobs:
            click.echo("No jobs found")
            return
        for job in jobs:
            line = (
                f"{job.id}  {job.status:<9}  {job.job_type}  "
                f"attempts={job.attempts}/{job.max_attempts}"
            )
            if job.last_error:
                line += f"  error={job.last_error}"
            click.echo(line)
    finally:
        db.close()


@cli.command()
@click.option("--limit", default=10, show_default=True, help="Max jobs to process")
def run_jobs(limit: int):
    """Process one batch of pending jobs (webhook deliveries)."""
    from feedback_api.worker import run_pending_jobs

    db = SessionLocal()
    try:
        processed = asyncio.run(run_pending_jobs(db, limit=limit))
        click.echo(f"✓ Processed {processed} job(s)")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
