"""add_savings_goals

Revision ID: 8b2e61c4a7d3
Revises: 3f1c2b7d9e40
Create Date: 2026-10-20 10:04:17.220931

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b2e61c4a7d3'
down_revision: Union[str, Sequence[str], None] = '3f1c2b7d9e40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Add savings goals.

    Creates:
    - savings_goals table
    - savings_contributions table (each row linked to its savings transaction)
    """
    op.create_table(
        'savings_goals',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('target', sa.Numeric(precision=15, scale=2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('target >= 0', name='ck_savings_goals_target_non_negative'),
    )

    op.create_table(
        'savings_contributions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('goal_id', sa.String(length=36), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('transaction_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['goal_id'], ['savings_goals.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='ck_savings_contributions_amount_positive'),
    )

    op.create_index('ix_savings_contributions_goal_id', 'savings_contributions', ['goal_id'])
    op.create_index('ix_savings_contributions_date', 'savings_contributions', ['date'])


def downgrade() -> None:
    """Drop savings goals and their contributions."""
    op.drop_index('ix_savings_contributions_date', table_name='savings_contributions')
    op.drop_index('ix_savings_contributions_goal_id', table_name='savings_contributions')

    op.drop_table('savings_contributions')
    op.drop_table('savings_goals')
