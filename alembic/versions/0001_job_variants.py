"""Create job_variants registry table

Revision ID: 0001_job_variants
Revises:
Create Date: 2026-10-18
"""
from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = '0001_job_variants'
down_revision = None
branch_labels = None
depends_on = None


def _has_table(name: str) -> bool:
    insp = sa.inspect(op.get_bind())
    return name in insp.get_table_names()


def upgrade() -> None:
    if _has_table('job_variants'):
        return
    op.create_table(
        'job_variants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('job_name', sa.String(length=512), nullable=False),
        sa.Column('variant_name', sa.String(length=128), nullable=False),
        sa.Column('variant_value', sa.String(length=256), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('job_name', 'variant_name', name='uq_job_variants_job_variant'),
    )
    op.create_index('ix_job_variants_job_name', 'job_variants', ['job_name'])
    op.create_index('ix_job_variants_variant_name', 'job_variants', ['variant_name'])


def downgrade() -> None:
    op.drop_index('ix_job_variants_variant_name', table_name='job_variants')
    op.drop_index('ix_job_variants_job_name', table_name='job_variants')
    op.drop_table('job_variants')
