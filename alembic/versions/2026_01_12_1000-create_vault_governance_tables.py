"""create_vault_governance_tables

Revision ID: create_vault_gov_20260112
Revises: 
Create Date: 2026-01-12 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'create_vault_gov_20260112'
down_revision = None
branch_labels = None
depends_on = None

ENUMS = {
    'vault_stage': ('draft', 'published', 'contribution', 'acquire', 'locked', 'terminating', 'terminated', 'failed'),
    'assets_status_enum': ('pending', 'locked', 'released'),
    'assets_origin_type_enum': ('invested', 'contributed'),
    'assets_type_enum': ('nft', 'ft', 'ada'),
    'proposal_status_enum': ('unpaid', 'upcoming', 'active', 'passed', 'rejected', 'executed'),
    'proposal_proposal_type_enum': ('staking', 'distribution', 'termination', 'burning', 'marketplace_action', 'expansion'),
    'claims_type_enum': ('lp', 'contributor', 'acquirer', 'l4va', 'final_distribution', 'cancellation', 'distribution', 'termination', 'expansion'),
    'claims_status_enum': ('available', 'pending', 'claimed', 'failed'),
}


def _enum(name):
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def upgrade() -> None:
    # Step 1: Create enum types (idempotent)
    for name, values in ENUMS.items():
        labels = ", ".join(f"'{value}'" for value in values)
        op.execute(f"""
            DO $$
            BEGIN
                IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = '{name}') THEN
                    CREATE TYPE {name} AS ENUM ({labels});
                END IF;
            END $$;
        """)

    # Step 2: Create vaults table
    op.create_table(
        'vaults',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('stage', _enum('vault_stage'), nullable=False, server_default='draft'),
        sa.Column('acquire_multiplier', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('ada_distribution', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('apply_params_result', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('dispatch_preloaded_script', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('execution_threshold', sa.Numeric(5, 2), nullable=True),
        sa.Column('participation_threshold', sa.Numeric(5, 2), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_vaults_id'), 'vaults', ['id'], unique=False)
    op.create_index(op.f('ix_vaults_stage'), 'vaults', ['stage'], unique=False)

    # Step 3: Create assets table
    op.create_table(
        'assets',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('vault_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('policy_id', sa.String(length=64), nullable=False),
        sa.Column('asset_id', sa.String(length=128), nullable=False),
        sa.Column('type', _enum('assets_type_enum'), nullable=False, server_default='nft'),
        sa.Column('quantity', sa.Numeric(20, 2), nullable=False, server_default='1'),
        sa.Column('status', _enum('assets_status_enum'), nullable=False, server_default='pending'),
        sa.Column('origin_type', _enum('assets_origin_type_enum'), nullable=True),
        sa.Column('locked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('released_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('added_by', sa.String(length=255), nullable=True),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.ForeignKeyConstraint(['vault_id'], ['vaults.id'], name='fk_assets_vault_id'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_assets_id'), 'assets', ['id'], unique=False)
    op.create_index(op.f('ix_assets_vault_id'), 'assets', ['vault_id'], unique=False)
    op.create_index(op.f('ix_assets_status'), 'assets', ['status'], unique=False)
    op.create_index('ix_assets_vault_status', 'assets', ['vault_id', 'status'], unique=False)

    # Step 4: Create proposal table
    op.create_table(
        'proposal',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('vault_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_id', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', _enum('proposal_status_enum'), nullable=False),
        sa.Column('proposal_type', _enum('proposal_proposal_type_enum'), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('execution_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('fungible_tokens', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('non_fungible_tokens', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('distribution_assets', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('burn_assets', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('termination_reason', sa.Text(), nullable=True),
        sa.Column('termination_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('has_custom_vote_options', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('abstain', sa.Boolean(), nullable=True, server_default='false'),
        sa.ForeignKeyConstraint(['vault_id'], ['vaults.id'], name='fk_proposal_vault_id', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_proposal_id'), 'proposal', ['id'], unique=False)
    op.create_index(op.f('ix_proposal_vault_id'), 'proposal', ['vault_id'], unique=False)
    op.create_index(op.f('ix_proposal_status'), 'proposal', ['status'], unique=False)
    op.create_index('ix_proposal_vault_status', 'proposal', ['vault_id', 'status'], unique=False)

    # Step 5: Create vote_options table
    op.create_table(
        'vote_options',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('proposal_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('label', sa.String(length=255), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['proposal_id'], ['proposal.id'], name='fk_vote_options_proposal_id'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_vote_options_proposal_id'), 'vote_options', ['proposal_id'], unique=False)

    # Step 6: Create vote table (one vote per voter per proposal)
    op.create_table(
        'vote',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('proposal_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('voter_id', sa.String(length=255), nullable=False),
        sa.Column('voter_address', sa.String(length=255), nullable=True),
        sa.Column('vote_weight', sa.BigInteger(), nullable=False, server_default='1'),
        sa.Column('vote_option_id', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['proposal_id'], ['proposal.id'], name='fk_vote_proposal_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('proposal_id', 'voter_id', name='uq_vote_proposal_voter'),
    )
    op.create_index(op.f('ix_vote_proposal_id'), 'vote', ['proposal_id'], unique=False)
    op.create_index(op.f('ix_vote_voter_id'), 'vote', ['voter_id'], unique=False)

    # Step 7: Create claims table
    op.create_table(
        'claims',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('vault_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('type', _enum('claims_type_enum'), nullable=False),
        sa.Column('status', _enum('claims_status_enum'), nullable=False, server_default='available'),
        sa.Column('amount', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('lovelace_amount', sa.BigInteger(), nullable=True),
        sa.Column('multiplier', sa.Numeric(30, 10), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.ForeignKeyConstraint(['vault_id'], ['vaults.id'], name='fk_claims_vault_id'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_claims_id'), 'claims', ['id'], unique=False)
    op.create_index(op.f('ix_claims_user_id'), 'claims', ['user_id'], unique=False)
    op.create_index(op.f('ix_claims_vault_id'), 'claims', ['vault_id'], unique=False)


def downgrade() -> None:
    op.drop_table('claims')
    op.drop_table('vote')
    op.drop_table('vote_options')
    op.drop_table('proposal')
    op.drop_table('assets')
    op.drop_table('vaults')
    for name in reversed(list(ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
