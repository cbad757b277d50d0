"""create enquiry and course tables

Revision ID: a3c91e5d7b20
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a3c91e5d7b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('enquiries',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('full_name', sa.String(length=200), nullable=False),
    sa.Column('email', sa.String(length=320), nullable=False),
    sa.Column('phone', sa.String(length=50), nullable=True),
    sa.Column('course_id', sa.String(length=64), nullable=True),
    sa.Column('course_interest', sa.String(length=200), nullable=True),
    sa.Column('message', sa.Text(), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
    sa.Column('admin_notes', sa.Text(), nullable=True),
    sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.CheckConstraint(
        "status IN ('pending', 'contacted', 'approved', 'rejected')",
        name='enquiry_status_check'
    ),
    sa.CheckConstraint('updated_at >= created_at', name='enquiry_timestamps_check')
    )
    op.create_index('idx_enquiries_status', 'enquiries', ['status'], unique=False)
    op.create_index('idx_enquiries_created_at', 'enquiries', ['created_at'], unique=False, postgresql_ops={'created_at': 'DESC'})

    op.create_table('courses',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('title', sa.String(length=200), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('category', sa.String(length=50), nullable=True),
    sa.Column('duration_days', sa.Integer(), nullable=False),
    sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False, server_default='149.00'),
    sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.CheckConstraint('duration_days > 0')
    )
    op.create_index('idx_courses_active', 'courses', ['is_active'], unique=False)

    op.create_table('featured_course_settings',
    sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('featured_course_ids', sa.JSON(), nullable=False),
    sa.Column('show_featured_courses', sa.Boolean(), nullable=False, server_default='true'),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.CheckConstraint('id = 1', name='featured_single_row_check')
    )


def downgrade() -> None:
    op.drop_table('featured_course_settings')

    op.drop_index('idx_courses_active', table_name='courses')
    op.drop_table('courses')

    op.drop_index('idx_enquiries_created_at', table_name='enquiries', postgresql_ops={'created_at': 'DESC'})
    op.drop_index('idx_enquiries_status', table_name='enquiries')
    op.drop_table('enquiries')
