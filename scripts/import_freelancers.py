#!/usr/bin/env python3
"""
Import freelancers from a JSON seed file into the SQLite database.

Usage:
    python scripts/import_freelancers.py --json data/freelancers.json --db data/freelancers.db
"""

import argparse
import json
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from freelancematch.database import Freelancer, init_database, get_session
from freelancematch.match_score import compute_match_score
from freelancematch.schema import validate_freelancer
from freelancematch.storage import add_freelancer, find_user


def load_records(json_path: Path) -> list:
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("freelancers", [])
    return data if isinstance(data, list) else []


def import_file(json_path: Path, db_path: Path, dry_run: bool = False) -> bool:
    """
    Import freelancer records.

    Records failing validation, and records whose user (username or email)
    already exists, are skipped.

    Args:
        json_path: Path to JSON seed file
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database
    """
    print(f"Loading freelancers from {json_path}...")
    records = load_records(json_path)
    print(f"Found {len(records)} freelancer records")

    if dry_run:
        print("\n[DRY RUN] Would import the following freelancers:")
        for i, record in enumerate(records[:5], 1):
            errors = validate_freelancer(record)
            status = "invalid" if errors else f"score {compute_match_score(record):.2f}"
            print(f"  {i}. {record.get('profession')} ({record.get('location')}): {status}")
        if len(records) > 5:
            print(f"  ... and {len(records) - 5} more")
        return True

    print(f"\nInitializing database at {db_path}...")
    init_database(db_path)
    session = get_session(db_path)

    imported = skipped = errors = 0
    for i, record in enumerate(records, 1):
        problems = validate_freelancer(record)
        if problems:
            print(f"⚠️  Skipping record {i}: {'; '.join(problems)}")
            skipped += 1
            continue
        if find_user(session, record.get("username"), record.get("email")) is not None:
            print(f"⚠️  Record {i} already imported, skipping")
            skipped += 1
            continue
        try:
            add_freelancer(session, record)
            imported += 1
            if imported % 20 == 0:
                print(f"  Imported {imported} freelancers...")
        except Exception as e:
            print(f"❌ Error importing record {i}: {e}")
            errors += 1

    try:
        session.commit()
        total = session.query(Freelancer).count()
        print(f"\n✅ Import complete!")
        print(f"   Imported: {imported}")
        print(f"   Skipped:  {skipped}")
        print(f"   Errors:   {errors}")
        print(f"   Total in database: {total}")
    except Exception as e:
        session.rollback()
        print(f"❌ Failed to commit: {e}")
        return False
    finally:
        session.close()

    return errors == 0


def main():
    parser = argparse.ArgumentParser(description="Import freelancers from JSON into the database")
    parser.add_argument("--json", type=Path, default=Path("data/freelancers.json"),
                        help="Path to JSON seed file")
    parser.add_argument("--db", type=Path, default=Path("data/freelancers.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show what would be imported without writing")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"❌ JSON file not found: {args.json}")
        sys.exit(1)

    success = import_file(args.json, args.db, dry_run=args.dry_run)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
