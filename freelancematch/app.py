import argparse
import json
from pathlib import Path
from typing import Any, Dict, List

from . import __version__
from .database import init_database, get_session
from .env import get_settings, load_env
from .errors import FreelanceMatchError
from .llm_client import LLMClient
from .logger import get_logger
from .match_score import (
    PRESETS,
    FreelancerMetrics,
    compute_match_score,
    compute_skills_overlap_score,
    score_breakdown,
)
from .matching import JobRequest, MatchingService
from .schema import validate_freelancer, validate_job_request
from .storage import add_freelancer, add_review, find_user, list_freelancers, update_metrics

logger = get_logger()


def _split_skills(value: str) -> List[str]:
    return [s.strip() for s in (value or "").split(",") if s.strip()]


def _load_json(path_str: str) -> Any:
    input_path = Path(path_str)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")


def _open_session(args: argparse.Namespace):
    db_path = Path(args.db)
    init_database(db_path)
    return get_session(db_path)


def import_freelancers(records: List[Dict[str, Any]], session) -> Dict[str, int]:
    """Insert valid records, skipping invalid ones. Returns counts."""
    added = skipped = 0
    for i, record in enumerate(records, 1):
        errors = validate_freelancer(record)
        if errors:
            logger.warning(f"Skipping freelancer record {i}", errors=errors)
            skipped += 1
            continue
        if find_user(session, record.get("username"), record.get("email")) is not None:
            logger.warning(f"Skipping freelancer record {i}: user already exists", username=record.get("username"))
            skipped += 1
            continue
        add_freelancer(session, record)
        added += 1
    session.commit()
    return {"added": added, "skipped": skipped}


def cmd_score(args: argparse.Namespace) -> None:
    metrics = FreelancerMetrics(
        job_performance=args.job_performance,
        skills_experience=args.skills_experience,
        responsiveness=args.responsiveness,
        fairness_score=args.fairness_score,
    )
    score = compute_match_score(metrics, args.preset)
    breakdown = score_breakdown(metrics, args.preset)
    print(f"Preset: {args.preset}")
    print(f"Match score: {score if isinstance(score, int) else f'{score:.2f}'}")
    print("Components:")
    for key, value in breakdown.to_dict().items():
        print(f"  {key}: {value * 100:.2f}")


def cmd_overlap(args: argparse.Namespace) -> None:
    score = compute_skills_overlap_score(_split_skills(args.skills), _split_skills(args.requested))
    print(f"Skills overlap: {score:.2f} / 30.00")


def cmd_validate(args: argparse.Namespace) -> None:
    data = _load_json(args.input)
    validator = validate_job_request if args.kind == "job" else validate_freelancer
    errors = validator(data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_import(args: argparse.Namespace) -> None:
    data = _load_json(args.input)
    records = data.get("freelancers", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise SystemExit("Expected a list of freelancer records")
    session = _open_session(args)
    try:
        counts = import_freelancers(records, session)
    finally:
        session.close()
    print(f"Done. added={counts['added']} skipped={counts['skipped']}")


def cmd_list(args: argparse.Namespace) -> None:
    session = _open_session(args)
    try:
        freelancers = list_freelancers(session, available_only=args.available)
        if not freelancers:
            print("No freelancers in database.")
            return
        print(f"Found {len(freelancers)} freelancers:\n")
        for f in freelancers:
            m = f.metrics
            print(f"ID: {f.id}, Profession: {f.profession}")
            print(f"  Metrics: JP={m.job_performance}, SE={m.skills_experience}, "
                  f"RE={m.responsiveness}, FS={m.fairness_score}")
            print(f"  Estimated match score: {compute_match_score(m, 'matching'):.2f}"
                  f" (display {compute_match_score(m, 'display')})")
            print()
    finally:
        session.close()


def cmd_update(args: argparse.Namespace) -> None:
    session = _open_session(args)
    try:
        before, after = update_metrics(
            session,
            args.freelancer_id,
            job_performance=args.job_performance,
            skills_experience=args.skills_experience,
            responsiveness=args.responsiveness,
            fairness_score=args.fairness_score,
        )
    except FreelanceMatchError as e:
        raise SystemExit(str(e))
    finally:
        session.close()
    old, new = compute_match_score(before), compute_match_score(after)
    print(f"Updated freelancer {args.freelancer_id}: {after.as_dict()}")
    print(f"Match score: {old:.2f} -> {new:.2f} ({new - old:+.2f})")


def cmd_review(args: argparse.Namespace) -> None:
    session = _open_session(args)
    try:
        outcome = add_review(
            session,
            client_id=args.client_id,
            freelancer_id=args.freelancer_id,
            rating=args.rating,
            impacts={
                "job_performance": args.job_performance,
                "skills_experience": args.skills_experience,
                "responsiveness": args.responsiveness,
                "fairness_score": args.fairness_score,
            },
            comment=args.comment,
        )
    except (FreelanceMatchError, ValueError) as e:
        raise SystemExit(str(e))
    finally:
        session.close()
    print(f"Added review {outcome['review_id']} (rating now {outcome['rating']}/50)")
    print(f"Match score: {outcome['old_score']:.2f} -> {outcome['new_score']:.2f}")


def cmd_match(args: argparse.Namespace) -> None:
    settings = get_settings()
    job = JobRequest(
        description=args.description,
        skills=_split_skills(args.skills),
        budget=args.budget,
        timeline=args.timeline,
        preferred_location=args.location,
    )
    errors = validate_job_request(job.to_dict())
    if errors:
        raise SystemExit("; ".join(errors))

    client = None if args.local else LLMClient.from_settings(settings)
    session = _open_session(args)
    try:
        top_n = args.top if args.top is not None else settings.MATCH_TOP_N
        service = MatchingService(session, llm_client=client, top_n=top_n)
        result = service.process_job_request(job, use_ai=not args.local)
        logger.log_metrics_summary()
    except FreelanceMatchError as e:
        raise SystemExit(str(e))
    finally:
        session.close()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    print(result.job_analysis.get("analysisText", ""))
    for rank, match in enumerate(result.matches, 1):
        name = match.freelancer.get("displayName")
        print(f"\n{rank}. {name} ({match.freelancer.get('profession')}) score={match.score:.2f}")
        for reason in match.match_reasons:
            print(f"   - {reason}")
    if result.suggested_questions:
        print("\nSuggested questions:")
        for q in result.suggested_questions:
            print(f" - {q}")


def _add_metric_args(parser: argparse.ArgumentParser, default=None, help_suffix: str = "") -> None:
    parser.add_argument("--job-performance", type=float, default=default, help=f"Job performance{help_suffix}")
    parser.add_argument("--skills-experience", type=float, default=default, help=f"Skills & experience{help_suffix}")
    parser.add_argument("--responsiveness", type=float, default=default, help=f"Responsiveness{help_suffix}")
    parser.add_argument("--fairness-score", type=float, default=default, help=f"Fairness score{help_suffix}")


def main():
    # Load .env if present (DEEPSEEK_API_KEY, DATABASE_PATH, etc.)
    load_env()
    settings = get_settings()
    logger.configure(level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR)
    parser = argparse.ArgumentParser(prog="freelancematch", description="Freelancer match scoring and job matching")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    def with_db(p: argparse.ArgumentParser) -> argparse.ArgumentParser:
        p.add_argument("--db", default=str(settings.DATABASE_PATH),
                       help=f"Path to SQLite database (default: {settings.DATABASE_PATH})")
        return p

    sc = subparsers.add_parser("score", help="Compute a match score from four metrics")
    _add_metric_args(sc, default=0.0, help_suffix=" (0-100, default 0)")
    sc.add_argument("--preset", choices=sorted(PRESETS), default="matching", help="Weighting preset (default: matching)")
    sc.set_defaults(func=cmd_score)

    ov = subparsers.add_parser("overlap", help="Score skills overlap (0-30)")
    ov.add_argument("--skills", required=True, help="Comma-separated freelancer skills")
    ov.add_argument("--requested", default="", help="Comma-separated requested skills")
    ov.set_defaults(func=cmd_overlap)

    val = subparsers.add_parser("validate", help="Validate a freelancer or job request JSON file")
    val.add_argument("--input", required=True, help="Path to JSON input")
    val.add_argument("--kind", choices=["freelancer", "job"], default="freelancer", help="Record type")
    val.set_defaults(func=cmd_validate)

    imp = with_db(subparsers.add_parser("import", help="Import freelancers from a JSON file"))
    imp.add_argument("--input", required=True, help="JSON list of freelancer records (or {\"freelancers\": [...]})")
    imp.set_defaults(func=cmd_import)

    lst = with_db(subparsers.add_parser("list", help="List freelancers with their estimated match score"))
    lst.add_argument("--available", action="store_true", help="Only available freelancers")
    lst.set_defaults(func=cmd_list)

    upd = with_db(subparsers.add_parser("update", help="Set a freelancer's metrics"))
    upd.add_argument("freelancer_id", type=int, help="Freelancer ID")
    _add_metric_args(upd, help_suffix=" (omit to keep)")
    upd.set_defaults(func=cmd_update)

    rev = with_db(subparsers.add_parser("review", help="Add a review and apply metric impacts"))
    rev.add_argument("client_id", type=int, help="Reviewing client user ID")
    rev.add_argument("freelancer_id", type=int, help="Freelancer ID")
    rev.add_argument("rating", type=int, help="Rating 1-5")
    rev.add_argument("--comment", help="Review text")
    _add_metric_args(rev, help_suffix=" change (-100 to 100)")
    rev.set_defaults(func=cmd_review)

    mt = with_db(subparsers.add_parser("match", help="Find the best freelancers for a job description"))
    mt.add_argument("--description", required=True, help="Job description")
    mt.add_argument("--skills", default="", help="Comma-separated required skills")
    mt.add_argument("--budget", type=float, help="Budget")
    mt.add_argument("--timeline", help="Timeline")
    mt.add_argument("--location", help="Preferred freelancer location")
    mt.add_argument("--top", type=int, help=f"Number of matches (default: {settings.MATCH_TOP_N})")
    mt.add_argument("--local", action="store_true", help="Skip the AI service")
    mt.add_argument("--json", action="store_true", help="Print the result as JSON")
    mt.set_defaults(func=cmd_match)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
