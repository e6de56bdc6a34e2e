#!/usr/bin/env python3
"""Run a full match recalculation directly against the database, without the API.

Usage: recalculate_all.py [startup_id]
"""
import sys, os, json, logging
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from frictionless.config import DB_PATH
from frictionless.db import ProfileStore
from frictionless.errors import MatchingError
from frictionless.matching import recalculate_all_matches, recalculate_matches

def main():
    logging.basicConfig(level=logging.INFO)
    store = ProfileStore(DB_PATH)

    if len(sys.argv) > 1:
        try:
            result = recalculate_matches(store, sys.argv[1])
        except MatchingError as e:
            print(f"Failed: {e}")
            sys.exit(1)
        print(f"Created {result.matches_created} matches for {sys.argv[1]}")
        return

    report = recalculate_all_matches(store, trigger="cli")
    print(json.dumps(report.model_dump(mode="json", exclude_none=True), indent=2))
    if report.failures:
        sys.exit(1)

if __name__ == "__main__":
    main()
