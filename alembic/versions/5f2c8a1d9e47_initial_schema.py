"""initial_schema

Revision ID: 5f2c8a1d9e47
Revises:
Create Date: 2026-10-19 10:12:44.518302

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '5f2c8a1d9e47'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the menu and stats tables."""
    op.create_table(
        'menu',
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.CheckConstraint('price >= 0', name='ck_menu_price_non_negative'),
        sa.PrimaryKeyConstraint('key'),
    )
    op.create_table(
        'stats',
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('coffee_key', sa.String(), nullable=False),
        sa.Column('payment', sa.String(), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.Column('revenue', sa.Integer(), nullable=False),
        sa.CheckConstraint('count >= 0', name='ck_stats_count_non_negative'),
        sa.PrimaryKeyConstraint('date', 'coffee_key', 'payment', name='pk_stats'),
    )


def downgrade() -> None:
    """Drop the menu and stats tables."""
    op.drop_table('stats')
    op.drop_table('menu')
