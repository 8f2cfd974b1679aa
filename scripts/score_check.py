#!/usr/bin/env python3
"""
Check the match score formula and every stored freelancer against it.

Runs the fixed cases (perfect, minimum, single metric, out of range) for
both presets, then recomputes each stored freelancer's score and breakdown.

Usage:
    python scripts/score_check.py --db data/freelancers.db
"""

import argparse
import math
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from freelancematch.database import get_session
from freelancematch.match_score import (
    MATCHING,
    PRESETS,
    FreelancerMetrics,
    compute_match_score,
    score_breakdown,
)
from freelancematch.storage import list_freelancers

TOLERANCE = 1e-9

EDGE_CASES = [
    ("All perfect (100%)", (100, 100, 100, 100)),
    ("All minimum (0%)", (0, 0, 0, 0)),
    ("Negative values", (-10, -20, -30, -40)),
    ("Values above 100%", (150, 120, 110, 130)),
    ("Mix of valid and invalid", (90, -10, 80, 110)),
    ("Extreme negatives", (-1000, -2000, -3000, -4000)),
    ("Extreme positives", (1000, 2000, 3000, 4000)),
    ("Not a number", (float("nan"), None, "n/a", float("inf"))),
]


def check_metrics(metrics: FreelancerMetrics) -> list:
    """Invariant violations for one set of metrics, across all presets."""
    problems = []
    for preset in PRESETS.values():
        score = compute_match_score(metrics, preset, rounded=False)
        if math.isnan(score) or not 0 <= score <= 100:
            problems.append(f"{preset.name}: score {score} out of range")
        breakdown = score_breakdown(metrics, preset)
        parts = (
            breakdown.job_performance
            + breakdown.skills_experience
            + breakdown.responsiveness
            + breakdown.fairness_score
        ) * 100
        if abs(min(100.0, parts) - score) > 1e-6:
            problems.append(f"{preset.name}: components sum to {parts:.4f}, score is {score:.4f}")
    return problems


def check_formula() -> list:
    problems = []

    print("Preset weights")
    print("--------------")
    for preset in PRESETS.values():
        print(f"  {preset.name}: JP={preset.job_performance:.2f} SE={preset.skills_experience:.2f} "
              f"RE={preset.responsiveness:.2f} FS={preset.fairness_score:.2f}")
        if abs(preset.total_weight - 1.0) > TOLERANCE:
            problems.append(f"{preset.name}: weights sum to {preset.total_weight}")
        if compute_match_score(FreelancerMetrics(100, 100, 100, 100), preset) != 100:
            problems.append(f"{preset.name}: perfect metrics do not score 100")
        if compute_match_score(FreelancerMetrics(0, 0, 0, 0), preset) != 0:
            problems.append(f"{preset.name}: minimum metrics do not score 0")

    print("\nIndividual metric contribution (matching preset, one at 100%)")
    print("-------------------------------------------------------------")
    for i, name in enumerate(("job_performance", "skills_experience", "responsiveness", "fairness_score")):
        values = [0, 0, 0, 0]
        values[i] = 100
        score = compute_match_score(FreelancerMetrics(*values), MATCHING)
        weight = getattr(MATCHING, name)
        print(f"  {name}: {score:.2f} / 100.00 ({weight:.0%} weight)")
        if abs(score - weight * 100) > 1e-6:
            problems.append(f"matching: {name} alone scores {score}, expected {weight * 100}")

    print("\nEdge cases")
    print("----------")
    for label, values in EDGE_CASES:
        metrics = FreelancerMetrics(*values)
        matching = compute_match_score(metrics, "matching")
        display = compute_match_score(metrics, "display")
        print(f"  {label}: matching={matching:.2f} display={display}")
        problems.extend(f"{label}: {p}" for p in check_metrics(metrics))

    return problems


def check_database(db_path: Path) -> list:
    problems = []
    print(f"\nStored freelancers ({db_path})")
    print("------------------")
    session = get_session(db_path)
    try:
        freelancers = list_freelancers(session)
        if not freelancers:
            print("  No freelancers found in the database.")
        for f in freelancers:
            m = f.metrics
            b = score_breakdown(m, MATCHING)
            print(f"  Freelancer {f.id} ({f.profession}):")
            print(f"    Metrics: JP={m.job_performance}, SE={m.skills_experience}, "
                  f"RE={m.responsiveness}, FS={m.fairness_score}")
            print(f"    Match score: {b.total:.2f} / 100.00 (display {compute_match_score(m, 'display')})")
            print(f"    Components: JP={b.job_performance * 100:.2f}, SE={b.skills_experience * 100:.2f}, "
                  f"RE={b.responsiveness * 100:.2f}, FS={b.fairness_score * 100:.2f}")
            if m != m.clamped():
                problems.append(f"freelancer {f.id}: stored metrics outside 0-100")
            problems.extend(f"freelancer {f.id}: {p}" for p in check_metrics(m))
    finally:
        session.close()
    return problems


def main():
    parser = argparse.ArgumentParser(description="Check match score invariants and stored freelancer scores")
    parser.add_argument("--db", type=Path, default=None,
                        help="Path to SQLite database file (omit to check the formula only)")

    args = parser.parse_args()

    problems = check_formula()

    if args.db is not None:
        if not args.db.exists():
            print(f"❌ Database file not found: {args.db}")
            sys.exit(1)
        problems.extend(check_database(args.db))

    if problems:
        print(f"\n❌ {len(problems)} problem(s) found:")
        for p in problems:
            print(f"   - {p}")
        sys.exit(1)

    print("\n✅ All match score checks passed")
    sys.exit(0)


if __name__ == "__main__":
    main()
