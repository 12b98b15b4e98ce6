"""Initial marketplace schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns():
    return [
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    ]


def _index_base(table: str) -> None:
    op.create_index(op.f(f'ix_{table}_id'), table, ['id'])
    op.create_index(op.f(f'ix_{table}_created_at'), table, ['created_at'])


def upgrade() -> None:
    # Users
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('display_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='seeker'),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.PrimaryKeyConstraint('id'),
    )
    _index_base('users')
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Companies
    op.create_table(
        'companies',
        *_base_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('institute_type', sa.String(length=50), nullable=False),
        sa.Column('hr_email', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('logo_path', sa.String(length=500), nullable=True),
        sa.Column('proof_docs', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('owner_uid', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.PrimaryKeyConstraint('id'),
    )
    _index_base('companies')
    op.create_index(op.f('ix_companies_name'), 'companies', ['name'])
    op.create_index(op.f('ix_companies_owner_uid'), 'companies', ['owner_uid'], unique=True)
    op.create_index(op.f('ix_companies_status'), 'companies', ['status'])

    # Jobs
    op.create_table(
        'jobs',
        *_base_columns(),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=False),
        sa.Column('level', sa.String(length=100), nullable=False),
        sa.Column('institute_type', sa.String(length=50), nullable=False),
        sa.Column('employment_type', sa.String(length=50), nullable=False),
        sa.Column('location', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('min_salary', sa.Float(), nullable=True),
        sa.Column('max_salary', sa.Float(), nullable=True),
        sa.Column('currency', sa.String(length=10), nullable=True, server_default='INR'),
        sa.Column('qualifications', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('skills', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('responsibilities', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('requirements', sa.Text(), nullable=True),
        sa.Column('last_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('apply_mode', sa.String(length=20), nullable=True, server_default='internal'),
        sa.Column('apply_url', sa.String(length=1000), nullable=True),
        sa.Column('company_id', sa.String(length=64), nullable=False),
        sa.Column('poster_uid', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('approved_by', sa.String(length=64), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('application_count', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
    )
    _index_base('jobs')
    for column in ('title', 'department', 'level', 'institute_type', 'employment_type',
                   'last_date', 'company_id', 'poster_uid', 'status'):
        op.create_index(op.f(f'ix_jobs_{column}'), 'jobs', [column])

    # Applications
    op.create_table(
        'applications',
        *_base_columns(),
        sa.Column('job_id', sa.String(length=64), nullable=False),
        sa.Column('applicant_uid', sa.String(length=64), nullable=False),
        sa.Column('resume_path', sa.String(length=1000), nullable=False),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='submitted'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('dedupe_key', sa.String(length=200), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('dedupe_key'),
    )
    _index_base('applications')
    op.create_index(op.f('ix_applications_job_id'), 'applications', ['job_id'])
    op.create_index(op.f('ix_applications_applicant_uid'), 'applications', ['applicant_uid'])

    # Audit logs
    op.create_table(
        'audit_logs',
        *_base_columns(),
        sa.Column('actor_uid', sa.String(length=64), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('target_type', sa.String(length=30), nullable=False),
        sa.Column('target_id', sa.String(length=64), nullable=False),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _index_base('audit_logs')
    op.create_index(op.f('ix_audit_logs_actor_uid'), 'audit_logs', ['actor_uid'])
    op.create_index(op.f('ix_audit_logs_action'), 'audit_logs', ['action'])
    op.create_index(op.f('ix_audit_logs_target_id'), 'audit_logs', ['target_id'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('applications')
    op.drop_table('jobs')
    op.drop_table('companies')
    op.drop_table('users')
