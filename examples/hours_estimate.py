"""
Example of estimating development hours from commit history.

This example demonstrates:
1. Creating a repository instance
2. Configuring the session thresholds and a date window
3. Estimating hours per author
4. Looking at the sessions behind one author's estimate
"""

import time

from githours import Config, Repository, parse_date_input, session_breakdown
from githours.filter import build_ledger

__author__ = "willmcginnis"


if __name__ == "__main__":
    print("Initializing repository...")
    start_time = time.time()

    # Use pygeohash repository - a good size for examples
    repo = Repository(working_dir="https://github.com/wdm0006/pygeohash.git")

    config = Config(
        max_commit_diff_in_minutes=90,
        first_commit_addition_in_minutes=30,
        since=parse_date_input("2015-01-01"),
        merge_request=False,
    )

    print("\nEstimating development hours...")
    result = repo.hours_estimate(config)

    print("\nResults:")
    print(result.to_frame().sort_values("hours", ascending=False))

    print("\nSessions of the most active author:")
    busiest = max(result.authors.items(), key=lambda kv: kv[1].commits)[0]
    ledger = build_ledger(repo.iter_commits(), config)
    sessions = session_breakdown(
        ledger.timestamps[busiest],
        max_commit_diff_in_minutes=config.max_commit_diff_in_minutes,
        first_commit_addition_in_minutes=config.first_commit_addition_in_minutes,
    )
    print(sessions.tail(10))

    end_time = time.time()
    print(f"\nAnalysis completed in {end_time - start_time:.2f} seconds")
