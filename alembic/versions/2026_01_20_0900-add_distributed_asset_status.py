"""add_distributed_asset_status

Revision ID: asset_distributed_20260120
Revises: create_vault_gov_20260112
Create Date: 2026-01-20 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'asset_distributed_20260120'
down_revision = 'create_vault_gov_20260112'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Step 1: Add 'distributed' to assets_status_enum (idempotent)
    op.execute("""
        DO $$
        BEGIN
            IF NOT EXISTS (
                SELECT 1 FROM pg_enum
                WHERE enumlabel = 'distributed'
                AND enumtypid = (SELECT oid FROM pg_type WHERE typname = 'assets_status_enum')
            ) THEN
                ALTER TYPE assets_status_enum ADD VALUE 'distributed';
            END IF;
        END $$;
    """)

    # Step 2: Timestamp for the new status
    op.add_column('assets', sa.Column('distributed_at', sa.DateTime(timezone=True), nullable=True))

    # Step 3: Marketplace action payload on proposals
    op.add_column('proposal', sa.Column('marketplace_actions', postgresql.JSONB(astext_type=sa.Text()), nullable=True))


def downgrade() -> None:
    op.drop_column('proposal', 'marketplace_actions')
    op.drop_column('assets', 'distributed_at')
    # PostgreSQL cannot drop an enum value: move rows back and rebuild the type
    op.execute("UPDATE assets SET status = 'released' WHERE status = 'distributed'")
    op.execute("ALTER TABLE assets ALTER COLUMN status DROP DEFAULT")
    op.execute("ALTER TYPE assets_status_enum RENAME TO assets_status_enum_old")
    op.execute("CREATE TYPE assets_status_enum AS ENUM ('pending', 'locked', 'released')")
    op.execute("""
        ALTER TABLE assets
        ALTER COLUMN status TYPE assets_status_enum
        USING status::text::assets_status_enum
    """)
    op.execute("ALTER TABLE assets ALTER COLUMN status SET DEFAULT 'pending'")
    op.execute("DROP TYPE assets_status_enum_old")
