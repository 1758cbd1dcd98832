#!/usr/bin/env python3
"""
Pull the remote booking list into the local cache once and print the merged result.
Run after migrations so record_cache exists.
Run: cd backend && python scripts/sync_bookings.py [--list]
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.services.bookings import LocalRecordStore, merge_and_load


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--list", action="store_true", help="print each merged booking")
    args = parser.parse_args()

    print("Syncing remote bookings into the local cache...")
    outcome = merge_and_load(LocalRecordStore())
    print(f"Done. data_mode={outcome.data_mode} bookings={len(outcome.records)}")
    if outcome.degraded:
        print(f"Remote unavailable: {outcome.error}")
    if args.list:
        for b in outcome.records:
            print(f"  {b.get('date') or '-':<12} {b.get('time_slot') or '-':<10} {b.get('guest_name') or '-':<24} {b.get('id')}")
    return 1 if outcome.degraded else 0


if __name__ == "__main__":
    sys.exit(main())
