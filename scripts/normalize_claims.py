#!/usr/bin/env python3
"""
Backfill script for legacy claim amounts

Moves metadata.adaAmount / metadata.multiplier into the lovelace_amount /
multiplier columns. It is idempotent: already-normalized claims are skipped.

Usage:
    python -m scripts.normalize_claims --dry-run
    python -m scripts.normalize_claims --limit 500
"""

import argparse
import sys
from typing import Any, Dict, Optional

# Add repository root to path
sys.path.insert(0, '.')

from sqlalchemy.orm import Session

# Import all models first to ensure relationships are resolved
import vaultdao.models  # noqa: F401
from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.services.claim_service import normalize_claims


def run_normalize_claims(db: Session, limit: Optional[int] = None, dry_run: bool = False) -> Dict[str, Any]:
    """
    Normalize legacy claims in one transaction.

    dry_run counts candidates and rolls back.

    Returns:
        Dict with normalized_count, skipped_count, errors
    """
    if dry_run:
        try:
            return normalize_claims(db, limit=limit, dry_run=True)
        finally:
            db.rollback()

    with transaction(db):
        return normalize_claims(db, limit=limit)


def main():
    parser = argparse.ArgumentParser(description='Normalize legacy claim metadata amounts into columns')
    parser.add_argument('--dry-run', action='store_true', help='Simulate without committing to database')
    parser.add_argument('--limit', type=int, help='Limit number of claims to normalize')

    args = parser.parse_args()

    if args.limit is not None and args.limit <= 0:
        print(f"ERROR: --limit must be positive: {args.limit}")
        sys.exit(1)

    # Get database session
    db = next(get_db())

    try:
        print("=" * 80)
        print("Claims Normalization")
        print("=" * 80)
        if args.dry_run:
            print("DRY RUN MODE - No changes will be committed")
        if args.limit:
            print(f"Limit: {args.limit}")
        print("=" * 80)

        stats = run_normalize_claims(db, limit=args.limit, dry_run=args.dry_run)

        print("=" * 80)
        print("Normalization Summary")
        print("=" * 80)
        print(f"Normalized: {stats['normalized_count']}")
        print(f"Skipped (already normalized): {stats['skipped_count']}")
        print(f"Errors: {len(stats['errors'])}")
        if stats['errors']:
            print("\nErrors:")
            for error in stats['errors']:
                print(f"  - {error}")
        print("=" * 80)

        if stats['errors']:
            sys.exit(1)

    finally:
        db.close()


if __name__ == '__main__':
    main()
