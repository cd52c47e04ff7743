"""add_governance_snapshots

Revision ID: governance_snapshots_20260305
Revises: system_settings_20260218
Create Date: 2026-03-05 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'governance_snapshots_20260305'
down_revision = 'system_settings_20260218'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Step 1: Create snapshot table
    op.create_table(
        'snapshot',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('vault_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('asset_id', sa.String(length=255), nullable=False),
        sa.Column('address_balances', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['vault_id'], ['vaults.id'], name='fk_snapshot_vault_id', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_snapshot_vault_id'), 'snapshot', ['vault_id'], unique=False)
    op.create_index('ix_snapshot_vault_created', 'snapshot', ['vault_id', 'created_at'], unique=False)

    # Step 2: Bind proposals to a snapshot (existing proposals keep NULL)
    op.add_column('proposal', sa.Column('snapshot_id', postgresql.UUID(as_uuid=True), nullable=True))
    op.create_foreign_key('fk_proposal_snapshot_id', 'proposal', 'snapshot', ['snapshot_id'], ['id'])

    # Step 3: Votes without an address fall back to the voter id, then address becomes mandatory
    op.execute("UPDATE vote SET voter_address = voter_id WHERE voter_address IS NULL")
    op.alter_column('vote', 'voter_address', existing_type=sa.String(length=255), nullable=False)
    op.create_unique_constraint('uq_vote_proposal_address', 'vote', ['proposal_id', 'voter_address'])


def downgrade() -> None:
    op.drop_constraint('uq_vote_proposal_address', 'vote', type_='unique')
    op.alter_column('vote', 'voter_address', existing_type=sa.String(length=255), nullable=True)
    op.drop_constraint('fk_proposal_snapshot_id', 'proposal', type_='foreignkey')
    op.drop_column('proposal', 'snapshot_id')
    op.drop_index('ix_snapshot_vault_created', table_name='snapshot')
    op.drop_index(op.f('ix_snapshot_vault_id'), table_name='snapshot')
    op.drop_table('snapshot')
