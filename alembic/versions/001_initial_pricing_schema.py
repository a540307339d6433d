"""Initial pricing schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

WHY: Users log in to the calculators, proposals keep their priced results,
pricing_settings holds the shared JSON rate tables, and pabx_settings /
pabx_prices back the PABX/SIP calculator.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade() -> None:
    """
    Create the pricing tables.

    WHY: Role and proposal type are stored as VARCHAR (non native enums) so
    new values don't need a type migration.
    """
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'proposals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('base_id', sa.String(length=64), nullable=False, comment='Public proposal identifier'),
        sa.Column('proposal_number', sa.String(length=16), nullable=True, comment='Sequential number NNNN/YYYY'),
        sa.Column('title', sa.String(length=255), nullable=False, comment='Proposal title'),
        sa.Column('type', sa.String(length=20), nullable=False, server_default='GENERAL'),
        sa.Column('status', sa.String(length=64), nullable=False, server_default='Rascunho'),
        sa.Column('client', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('client_data', JSONB(), nullable=True),
        sa.Column('account_manager', JSONB(), nullable=True),
        sa.Column('value', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('total_setup', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('total_monthly', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('contract_period', sa.Integer(), nullable=False, server_default='12'),
        sa.Column('date', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('expiry_date', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('products', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('items_data', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('metadata', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('created_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_proposals_id', 'proposals', ['id'])
    op.create_index('ix_proposals_base_id', 'proposals', ['base_id'], unique=True)
    op.create_index('ix_proposals_proposal_number', 'proposals', ['proposal_number'])
    op.create_index('ix_proposals_type', 'proposals', ['type'])
    op.create_index('ix_proposals_status', 'proposals', ['status'])
    op.create_index('ix_proposals_created_by', 'proposals', ['created_by'])

    op.create_table(
        'pricing_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', JSONB(), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pricing_settings_id', 'pricing_settings', ['id'])
    op.create_index('ix_pricing_settings_key', 'pricing_settings', ['key'], unique=True)

    op.create_table(
        'pabx_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('user_name', sa.String(length=255), nullable=True),
        sa.Column('pabx_extensions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('pabx_modality', sa.String(length=20), nullable=False, server_default='Standard'),
        sa.Column('pabx_premium_plan', sa.String(length=20), nullable=False, server_default='Essencial'),
        sa.Column('pabx_premium_sub_plan', sa.String(length=20), nullable=False, server_default='Ilimitado'),
        sa.Column('pabx_premium_equipment', sa.String(length=10), nullable=False, server_default='Sem'),
        sa.Column('contract_duration', sa.Integer(), nullable=False, server_default='12'),
        sa.Column('pabx_include_setup', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('pabx_include_devices', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('pabx_device_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('pabx_include_ai', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('pabx_ai_plan', sa.String(length=20), nullable=True),
        sa.Column('include_parceiro_indicador', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sip_plan', sa.String(length=100), nullable=True),
        sa.Column('sip_include_setup', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sip_additional_channels', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sip_with_equipment', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pabx_settings_id', 'pabx_settings', ['id'])
    op.create_index('ix_pabx_settings_user_id', 'pabx_settings', ['user_id'], unique=True)

    op.create_table(
        'pabx_prices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('price_type', sa.String(length=20), nullable=False, server_default='standard'),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('range_key', sa.String(length=10), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('price_type', 'category', 'range_key', name='uq_pabx_prices_cell'),
    )
    op.create_index('ix_pabx_prices_id', 'pabx_prices', ['id'])


def downgrade() -> None:
    """Drop the pricing tables in reverse dependency order."""
    op.drop_table('pabx_prices')
    op.drop_table('pabx_settings')
    op.drop_table('pricing_settings')
    op.drop_table('proposals')
    op.drop_table('users')
