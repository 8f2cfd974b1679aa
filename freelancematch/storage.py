"""
Freelancer repository.

CRUD helpers over a SQLAlchemy session. Metric writes are clamped to
0-100 integers so stored values always agree with what the scorer uses.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func

from .database import Freelancer, Review, User
from .errors import FreelancerNotFoundError
from .logger import get_logger
from .match_score import (
    FreelancerMetrics,
    RATING_MAX,
    clamp_metric,
    ranking_match_score,
    round_half_up,
)
from .normalize import extract_freelancer_name

logger = get_logger()

METRIC_FIELDS = ("job_performance", "skills_experience", "responsiveness", "fairness_score")
MAX_STORED_INT = 2**31 - 1


def _stored_metric(value: Any) -> int:
    return round_half_up(clamp_metric(value))


def _stored_count(value: Any) -> int:
    # Non-negative whole number that fits an SQLite INTEGER; NaN becomes 0
    return round_half_up(clamp_metric(value, high=MAX_STORED_INT))


def _clean_skills(skills: Any) -> List[str]:
    # Keep original casing for display; matching lowercases on the fly
    return [s.strip() for s in (skills or []) if isinstance(s, str) and s.strip()]


def add_freelancer(session, data: Dict[str, Any], user: Optional[User] = None) -> Freelancer:
    """
    Insert a freelancer from a validated record and flush it.

    A backing user is created when the record carries username and email.
    """
    if user is None and data.get("username") and data.get("email"):
        user = User(
            username=data["username"],
            email=data["email"],
            display_name=data.get("display_name"),
            is_client=False,
        )
        session.add(user)
        session.flush()

    freelancer = Freelancer(
        user_id=user.id if user is not None else None,
        profession=data["profession"],
        skills=_clean_skills(data.get("skills")),
        bio=data["bio"],
        hourly_rate=_stored_count(data.get("hourly_rate")),
        rating=round_half_up(clamp_metric(data.get("rating"), high=RATING_MAX)),
        completed_jobs=_stored_count(data.get("completed_jobs")),
        years_of_experience=(
            None if data.get("years_of_experience") is None
            else _stored_count(data["years_of_experience"])
        ),
        location=data["location"],
        availability=data.get("availability", True),
        image_url=data.get("image_url"),
        **{f: _stored_metric(data.get(f)) for f in METRIC_FIELDS},
    )
    session.add(freelancer)
    session.flush()
    logger.debug("Freelancer added", freelancer_id=freelancer.id, profession=freelancer.profession)
    return freelancer


def find_user(session, username: Optional[str], email: Optional[str]) -> Optional[User]:
    """User matching either the username or the email, if any."""
    if not username and not email:
        return None
    return session.query(User).filter(
        (User.username == username) | (User.email == email)
    ).first()


def get_freelancer(session, freelancer_id: int) -> Optional[Freelancer]:
    return session.get(Freelancer, freelancer_id)


def require_freelancer(session, freelancer_id: int) -> Freelancer:
    freelancer = get_freelancer(session, freelancer_id)
    if freelancer is None:
        raise FreelancerNotFoundError(freelancer_id)
    return freelancer


def list_freelancers(session, available_only: bool = False) -> List[Freelancer]:
    query = session.query(Freelancer)
    if available_only:
        query = query.filter(Freelancer.availability.is_(True))
    return query.order_by(Freelancer.id).all()


def get_display_name(session, freelancer: Freelancer) -> str:
    user = session.get(User, freelancer.user_id) if freelancer.user_id else None
    return extract_freelancer_name(
        freelancer.bio,
        user.display_name if user else None,
        freelancer.id,
    )


def update_metrics(session, freelancer_id: int, **metrics: Any) -> Tuple[FreelancerMetrics, FreelancerMetrics]:
    """
    Overwrite some or all of a freelancer's metrics.

    Returns:
        (metrics before, metrics after)

    Raises:
        FreelancerNotFoundError: unknown freelancer id
        ValueError: a keyword that is not a metric name
    """
    unknown = set(metrics) - set(METRIC_FIELDS)
    if unknown:
        raise ValueError(f"Unknown metric(s): {', '.join(sorted(unknown))}")

    freelancer = require_freelancer(session, freelancer_id)
    before = freelancer.metrics
    for name, value in metrics.items():
        if value is not None:
            setattr(freelancer, name, _stored_metric(value))
    session.commit()
    after = freelancer.metrics

    logger.info(
        f"Updated metrics for freelancer {freelancer_id}",
        before=before.as_dict(),
        after=after.as_dict(),
    )
    return before, after


def add_review(
    session,
    client_id: int,
    freelancer_id: int,
    rating: int,
    impacts: Optional[Dict[str, Any]] = None,
    comment: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Record a client review and apply its effect on the freelancer.

    The freelancer's rating becomes the average review rating scaled to
    0-50; each impact is added to the matching metric and clamped.

    Returns:
        Dict with review_id, rating, old/new metrics and old/new match score
    """
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValueError("Review rating must be between 1 and 5")
    impacts = impacts or {}
    unknown = set(impacts) - set(METRIC_FIELDS)
    if unknown:
        raise ValueError(f"Unknown metric(s): {', '.join(sorted(unknown))}")

    freelancer = require_freelancer(session, freelancer_id)
    before = freelancer.metrics
    old_score = ranking_match_score(before)

    try:
        review = Review(
            client_id=client_id,
            freelancer_id=freelancer_id,
            rating=rating,
            comment=comment or f"Review with rating {rating}",
        )
        session.add(review)
        session.flush()

        avg_rating = session.query(func.avg(Review.rating)).filter(
            Review.freelancer_id == freelancer_id
        ).scalar()
        freelancer.rating = round_half_up(float(avg_rating) * 10)

        for name in METRIC_FIELDS:
            delta = clamp_metric(impacts.get(name), low=-100, high=100)
            setattr(freelancer, name, _stored_metric(getattr(freelancer, name) + delta))

        session.commit()
    except Exception:
        session.rollback()
        raise

    after = freelancer.metrics
    new_score = ranking_match_score(after)
    logger.info(
        f"Review {review.id} added for freelancer {freelancer_id}",
        rating=rating,
        scaled_rating=freelancer.rating,
        score_change=round(new_score - old_score, 2),
    )
    return {
        "review_id": review.id,
        "rating": freelancer.rating,
        "before": before.as_dict(),
        "after": after.as_dict(),
        "old_score": old_score,
        "new_score": new_score,
    }
