"""Baseline migration - feedback forms, variants, responses and jobs

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Creates the form tables (with ON DELETE CASCADE from forms down to
variants and feedback) and the jobs table used as the webhook outbox.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create form and job tables."""

    # ==========================================================================
    # Forms
    # ==========================================================================
    op.create_table(
        'forms',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(300), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('webhook_url', sa.String(2000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id', name='pk_forms'),
        sa.UniqueConstraint('slug', name='uq_forms_slug'),
    )
    op.create_index('idx_forms_created_at', 'forms', ['created_at'])

    # ==========================================================================
    # Email variants
    # ==========================================================================
    op.create_table(
        'email_variants',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('form_id', sa.Uuid(), nullable=False),
        sa.Column('email_type', sa.String(20), nullable=False),
        sa.Column('variant_number', sa.Integer(), nullable=False),
        sa.Column('subject_line', sa.Text(), nullable=False),
        sa.Column('email_body', sa.Text(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id', name='pk_email_variants'),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id'], name='fk_email_variants_form_id_forms', ondelete='CASCADE'),
    )
    op.create_index('idx_email_variants_form_sort', 'email_variants', ['form_id', 'sort_order'])

    # ==========================================================================
    # Feedback responses
    # ==========================================================================
    op.create_table(
        'feedback_responses',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('form_id', sa.Uuid(), nullable=False),
        sa.Column('variant_id', sa.Uuid(), nullable=False),
        sa.Column('feedback_text', sa.Text(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id', name='pk_feedback_responses'),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id'], name='fk_feedback_responses_form_id_forms', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['variant_id'], ['email_variants.id'], name='fk_feedback_responses_variant_id_email_variants', ondelete='CASCADE'),
    )
    op.create_index('idx_feedback_responses_form', 'feedback_responses', ['form_id'])
    op.create_index('idx_feedback_responses_variant', 'feedback_responses', ['variant_id'])

    # ==========================================================================
    # Jobs (webhook outbox)
    # ==========================================================================
    op.create_table(
        'jobs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('job_type', sa.String(50), nullable=False),
        sa.Column('payload', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
        sa.Column('run_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_attempts', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('idempotency_key', sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_jobs'),
    )
    op.create_index('idx_jobs_pending', 'jobs', ['status', 'run_at'])
    op.create_index('uq_job_idempotency', 'jobs', ['idempotency_key'], unique=True)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('jobs')
    op.drop_table('feedback_responses')
    op.drop_table('email_variants')
    op.drop_table('forms')
