"""create_system_settings

Revision ID: system_settings_20260218
Revises: claims_metadata_20260203
Create Date: 2026-02-18 11:00:00.000000

"""
import json
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'system_settings_20260218'
down_revision = 'claims_metadata_20260203'
branch_labels = None
depends_on = None

SYSTEM_SETTINGS_ID = '470ba027-d444-404d-a377-b41257d0efe7'

# Governance fees in lovelace
GOVERNANCE_FEE_DEFAULTS = {
    'governance_fee_proposal_staking': 5000000,
    'governance_fee_proposal_distribution': 5000000,
    'governance_fee_proposal_termination': 10000000,
    'governance_fee_proposal_burning': 3000000,
    'governance_fee_proposal_marketplace_action': 5000000,
    'governance_fee_proposal_expansion': 10000000,
    'governance_fee_voting': 0,
}


def upgrade() -> None:
    # Step 1: Create system_settings table
    op.create_table(
        'system_settings',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('data', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_system_settings_id'), 'system_settings', ['id'], unique=False)

    # Step 2: Seed the singleton row; existing keys win on re-run
    op.execute(
        sa.text("""
            INSERT INTO system_settings (id, data)
            VALUES (CAST(:id AS uuid), CAST(:data AS jsonb))
            ON CONFLICT (id) DO UPDATE
            SET data = CAST(:data AS jsonb) || system_settings.data
        """).bindparams(
            id=SYSTEM_SETTINGS_ID,
            data=json.dumps(GOVERNANCE_FEE_DEFAULTS),
        )
    )


def downgrade() -> None:
    op.drop_index(op.f('ix_system_settings_id'), table_name='system_settings')
    op.drop_table('system_settings')
