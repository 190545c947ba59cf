"""create outages table

Revision ID: 3f2b9c71d0aa
Revises:
Create Date: 2024-05-04 10:12:41.338201

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2b9c71d0aa'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'outages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
    )
    op.create_index('ix_outages_id', 'outages', ['id'])
    op.create_index('ix_outages_start_time', 'outages', ['start_time'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_outages_start_time', table_name='outages')
    op.drop_index('ix_outages_id', table_name='outages')
    op.drop_table('outages')
