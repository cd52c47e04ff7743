"""migrate_claims_metadata_to_columns

Moves legacy metadata.adaAmount / metadata.multiplier into
claims.lovelace_amount / claims.multiplier. Same rules as
vaultdao.services.claim_service.ada_amount_to_lovelace:
>= 1000000 is already lovelace, below that ADA * 1000000, truncated.

Revision ID: claims_metadata_20260203
Revises: asset_distributed_20260120
Create Date: 2026-02-03 14:00:00.000000

"""
from alembic import op

# revision identifiers, used by Alembic.
revision = 'claims_metadata_20260203'
down_revision = 'asset_distributed_20260120'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Step 1: adaAmount -> lovelace_amount (only where the column is empty)
    op.execute("""
        UPDATE claims
        SET lovelace_amount =
            CASE
                WHEN (metadata->>'adaAmount')::numeric >= 1000000
                    THEN trunc((metadata->>'adaAmount')::numeric)::bigint
                ELSE trunc((metadata->>'adaAmount')::numeric * 1000000)::bigint
            END
        WHERE metadata->>'adaAmount' IS NOT NULL
          AND lovelace_amount IS NULL
    """)

    # Step 2: multiplier -> multiplier (only where the column is empty)
    op.execute("""
        UPDATE claims
        SET multiplier = CAST(metadata->>'multiplier' AS NUMERIC)
        WHERE metadata->>'multiplier' IS NOT NULL
          AND multiplier IS NULL
    """)

    # Step 3: Drop migrated keys from metadata
    op.execute("""
        UPDATE claims
        SET metadata = metadata - 'adaAmount' - 'multiplier'
        WHERE metadata ? 'adaAmount' OR metadata ? 'multiplier'
    """)


def downgrade() -> None:
    op.execute("""
        UPDATE claims
        SET metadata = COALESCE(metadata, '{}'::jsonb)
            || CASE WHEN lovelace_amount IS NOT NULL
                    THEN jsonb_build_object('adaAmount', lovelace_amount) ELSE '{}'::jsonb END
            || CASE WHEN multiplier IS NOT NULL
                    THEN jsonb_build_object('multiplier', multiplier) ELSE '{}'::jsonb END
        WHERE lovelace_amount IS NOT NULL OR multiplier IS NOT NULL
    """)
    op.execute("""
        UPDATE claims
        SET lovelace_amount = NULL, multiplier = NULL
        WHERE metadata ? 'adaAmount' OR metadata ? 'multiplier'
    """)
