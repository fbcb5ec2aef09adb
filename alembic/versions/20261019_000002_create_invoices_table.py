"""Create invoices table

Revision ID: 20261019_000002
Revises: 20261019_000001
Create Date: 2026-10-19

Job invoices with stored inputs, derived totals, lifecycle status and an
optimistic-locking version counter. Overdue is never stored.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '20261019_000002'
down_revision: Union[str, None] = '20261019_000001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the invoices table."""
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(32), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('labor_hours', sa.Numeric(precision=10, scale=4), nullable=True),
        sa.Column('hourly_rate', sa.Numeric(precision=12, scale=4), nullable=True),
        sa.Column('material_cost', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('tax_rate', sa.Numeric(precision=8, scale=6), nullable=False, server_default='0'),
        sa.Column('labor_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('tax_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('paid_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column(
            'status',
            sa.Enum(
                'draft', 'sent', 'viewed', 'accepted', 'paid', 'overdue',
                name='invoice_status',
                create_constraint=True,
            ),
            nullable=False,
            server_default='draft'
        ),
        sa.Column('sent_date', sa.DateTime(), nullable=True),
        sa.Column('viewed_date', sa.DateTime(), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['account_id'],
            ['accounts.id'],
            name='fk_invoices_account_id',
        ),
        sa.ForeignKeyConstraint(
            ['job_id'],
            ['jobs.id'],
            name='fk_invoices_job_id',
        ),
        sa.ForeignKeyConstraint(
            ['customer_id'],
            ['customers.id'],
            name='fk_invoices_customer_id',
        ),
        sa.UniqueConstraint('account_id', 'invoice_number', name='uq_invoices_account_number'),
    )

    # Create indexes for common queries
    op.create_index('ix_invoices_account_id', 'invoices', ['account_id'])
    op.create_index('ix_invoices_job_id', 'invoices', ['job_id'])
    op.create_index('ix_invoices_customer_id', 'invoices', ['customer_id'])
    op.create_index('ix_invoices_due_date', 'invoices', ['due_date'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])


def downgrade() -> None:
    """Drop the invoices table."""
    op.drop_index('ix_invoices_status', table_name='invoices')
    op.drop_index('ix_invoices_due_date', table_name='invoices')
    op.drop_index('ix_invoices_customer_id', table_name='invoices')
    op.drop_index('ix_invoices_job_id', table_name='invoices')
    op.drop_index('ix_invoices_account_id', table_name='invoices')
    op.drop_table('invoices')
