"""Create accounts, customers and jobs tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

Minimal account/customer/job records the invoicing core references by id.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the accounts, customers and jobs tables."""
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('business_name', sa.String(255), nullable=False),
        sa.Column('default_tax_rate', sa.Numeric(precision=8, scale=6), nullable=False, server_default='0'),
        sa.Column('default_invoice_notes', sa.Text(), nullable=True),
        sa.Column('payment_terms_days', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_accounts_owner_id', 'accounts', ['owner_id'], unique=True)

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['account_id'],
            ['accounts.id'],
            name='fk_customers_account_id',
        ),
    )
    op.create_index('ix_customers_account_id', 'customers', ['account_id'])

    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='lead'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['account_id'],
            ['accounts.id'],
            name='fk_jobs_account_id',
        ),
        sa.ForeignKeyConstraint(
            ['customer_id'],
            ['customers.id'],
            name='fk_jobs_customer_id',
        ),
    )
    op.create_index('ix_jobs_account_id', 'jobs', ['account_id'])
    op.create_index('ix_jobs_customer_id', 'jobs', ['customer_id'])


def downgrade() -> None:
    """Drop the jobs, customers and accounts tables."""
    op.drop_index('ix_jobs_customer_id', table_name='jobs')
    op.drop_index('ix_jobs_account_id', table_name='jobs')
    op.drop_table('jobs')
    op.drop_index('ix_customers_account_id', table_name='customers')
    op.drop_table('customers')
    op.drop_index('ix_accounts_owner_id', table_name='accounts')
    op.drop_table('accounts')
