"""create pages table

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1a2b3c4d5e6f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'pages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('draft_config', sa.JSON(none_as_null=True), nullable=True),
        sa.Column('published_config', sa.JSON(none_as_null=True), nullable=True),
        sa.Column('draft_saved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sa_orm_sentinel', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pages_owner_id', 'pages', ['owner_id'], unique=True)
    op.create_index('ix_pages_slug', 'pages', ['slug'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_pages_slug', table_name='pages')
    op.drop_index('ix_pages_owner_id', table_name='pages')
    op.drop_table('pages')
