"""widen_stats_revenue

Revision ID: a3e91c07d5b2
Revises: 5f2c8a1d9e47
Create Date: 2026-10-20 09:41:03.118274

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = 'a3e91c07d5b2'
down_revision: Union[str, Sequence[str], None] = '5f2c8a1d9e47'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Store stats.revenue as BIGINT; a day's total can pass 2^31-1."""
    with op.batch_alter_table('stats') as batch_op:
        batch_op.alter_column('revenue', existing_type=sa.Integer(), type_=sa.BigInteger(), existing_nullable=False)


def downgrade() -> None:
    """Narrow stats.revenue back to INTEGER."""
    with op.batch_alter_table('stats') as batch_op:
        batch_op.alter_column('revenue', existing_type=sa.BigInteger(), type_=sa.Integer(), existing_nullable=False)
