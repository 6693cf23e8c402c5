"""create_payroll_core_tables

Revision ID: 20261019_0900_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_0900_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'payroll_tax_parameters',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(100), nullable=False),
        sa.Column('value', sa.String(255), nullable=False),
        sa.Column('data_type', sa.String(20), nullable=False),
        sa.Column('category', sa.String(30), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
        comment='Configurable payroll parameters (CNAPS, OSTIE, minimum wage)',
    )
    op.create_index('ix_payroll_tax_parameters_id', 'payroll_tax_parameters', ['id'])
    op.create_index('ix_payroll_tax_parameters_key', 'payroll_tax_parameters', ['key'], unique=True)
    op.create_index('ix_payroll_tax_parameters_category', 'payroll_tax_parameters', ['category'])

    op.create_table(
        'payroll_irsa_brackets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('bracket_name', sa.String(50), nullable=False),
        sa.Column('min_income', sa.Numeric(15, 2), nullable=False),
        sa.Column('max_income', sa.Numeric(15, 2), nullable=True),
        sa.Column('tax_rate', sa.Numeric(7, 6), nullable=False),
        sa.Column('min_tax', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('effective_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
        comment='IRSA progressive withholding brackets',
    )
    op.create_index('ix_payroll_irsa_brackets_id', 'payroll_irsa_brackets', ['id'])
    op.create_index('ix_payroll_irsa_brackets_effective_date', 'payroll_irsa_brackets', ['effective_date'])
    op.create_index('idx_irsa_bracket_active_effective', 'payroll_irsa_brackets', ['is_active', 'effective_date'])

    op.create_table(
        'payroll_drafts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('gross_salary', sa.Numeric(15, 2), nullable=False),
        sa.Column('cnaps_base', sa.Numeric(15, 2), nullable=False),
        sa.Column('cnaps_employee', sa.Numeric(15, 2), nullable=False),
        sa.Column('cnaps_employer', sa.Numeric(15, 2), nullable=False),
        sa.Column('ostie_base', sa.Numeric(15, 2), nullable=False),
        sa.Column('ostie_employee', sa.Numeric(15, 2), nullable=False),
        sa.Column('ostie_employer', sa.Numeric(15, 2), nullable=False),
        sa.Column('irsa_amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('irsa_bracket', sa.String(50), nullable=False),
        sa.Column('net_salary', sa.Numeric(15, 2), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_audit_columns(),
    )
    op.create_index('ix_payroll_drafts_id', 'payroll_drafts', ['id'])
    op.create_index('ix_payroll_drafts_employee_id', 'payroll_drafts', ['employee_id'])
    op.create_index('ix_payroll_drafts_period', 'payroll_drafts', ['period_start', 'period_end'])
    # One live draft per employee and period; tombstoned rows free the slot
    op.create_index(
        'uq_payroll_drafts_employee_period_live',
        'payroll_drafts',
        ['employee_id', 'period_start', 'period_end'],
        unique=True,
        postgresql_where=sa.text('deleted_at IS NULL'),
        sqlite_where=sa.text('deleted_at IS NULL'),
    )

    op.create_table(
        'payroll_approved',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('draft_id', sa.Integer(), sa.ForeignKey('payroll_drafts.id'), nullable=False),
        sa.Column('fiche_paie_number', sa.String(40), nullable=False),
        sa.Column('accountant_id', sa.Integer(), nullable=False),
        sa.Column('gl_entries', sa.JSON(), nullable=False),
        sa.Column('digital_signature', sa.String(100), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('draft_id', name='uq_payroll_approved_draft_id'),
    )
    op.create_index('ix_payroll_approved_id', 'payroll_approved', ['id'])
    op.create_index('ix_payroll_approved_fiche_paie_number', 'payroll_approved', ['fiche_paie_number'], unique=True)
    op.create_index('ix_payroll_approved_accountant_id', 'payroll_approved', ['accountant_id'])
    op.create_index('ix_payroll_approved_approved_at', 'payroll_approved', ['approved_at'])


def downgrade() -> None:
    op.drop_table('payroll_approved')
    op.drop_index('uq_payroll_drafts_employee_period_live', table_name='payroll_drafts')
    op.drop_table('payroll_drafts')
    op.drop_table('payroll_irsa_brackets')
    op.drop_table('payroll_tax_parameters')
