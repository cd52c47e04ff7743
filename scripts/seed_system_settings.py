"""
Seed script to create the system settings row with governance fee defaults (idempotent)
"""

import sys
from pathlib import Path

# Add repository root to path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

# Import all models first to ensure relationships are resolved
import vaultdao.models  # noqa: F401

from sqlalchemy.orm import Session
from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.services.system_settings_service import DEFAULT_SYSTEM_SETTINGS, ensure_system_settings, update_settings


def seed_system_settings(db: Session) -> dict:
    """
    Create the settings row if missing and add any default key it lacks.

    Stored values are never overwritten.
    """
    print("Seeding system settings...")
    row = ensure_system_settings(db)
    stored = row.data or {}
    missing = {key: value for key, value in DEFAULT_SYSTEM_SETTINGS.items() if key not in stored}
    if missing:
        update_settings(db, missing)
        for key in sorted(missing):
            print(f"  ✓ Added {key}={missing[key]}")
    else:
        print("  ✓ All default keys present")
    return missing


def main():
    db = next(get_db())
    try:
        with transaction(db):
            seed_system_settings(db)
        print("\n✅ System settings seeded successfully")
    finally:
        db.close()


if __name__ == "__main__":
    main()
