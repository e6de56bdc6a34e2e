#!/usr/bin/env python3
"""Debug tool: show a startup's stored matches with the per-factor breakdown."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from frictionless.config import DB_PATH
from frictionless.db import ProfileStore
from frictionless.run_log import recent_runs
from frictionless.scoring import score_breakdown

def main():
    store = ProfileStore(DB_PATH)
    if len(sys.argv) < 2:
        print("Recent recalculation runs:")
        for run in recent_runs(DB_PATH, limit=10):
            print(f"  [{run['created_at']}] {run['trigger']} startup={run['startup_id']} "
                  f"ok={run['successes']} failed={run['failures']} matches={run['matches_created']} "
                  f"error={run['error']}")
        print(f"\nStartups: {len(store.list_startup_ids())}  Investors: {len(store.list_investors())}")
        return

    startup = store.get_startup(sys.argv[1])
    if startup is None:
        print(f"No startup profile for {sys.argv[1]}")
        sys.exit(1)
    print(f"{startup.company_name} | {startup.industry} | {startup.stage} | {startup.headquarters} | "
          f"ask={startup.funding_ask} | readiness={startup.readiness_score}")

    investors = {inv.user_id: inv for inv in store.list_investors()}
    for match in store.get_matches(startup.user_id):
        investor = investors.get(match.investor_id)
        name = investor.organization_name if investor else "?"
        print(f"\n{match.match_percentage:3d}%  {name} ({match.investor_id}) [{match.status.value}]")
        if investor:
            for factor, value in score_breakdown(startup, investor).items():
                print(f"      {factor:<12} {value:.1f}")

if __name__ == "__main__":
    main()
