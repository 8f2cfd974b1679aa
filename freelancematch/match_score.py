"""
Match Score Calculation.

Responsibilities:
- Combine four freelancer performance metrics into one bounded ranking score.
- Expose the two weighting presets used across the platform (display, matching).
- Score textual overlap between a freelancer's skills and a job's requested skills.

Non-Responsibilities:
- No database access.
- No logging.
- No input rejection: bad values are coerced, never raised on.

Invariant:
Every metric is clamped to [0, 100] before weighting and every score is
clamped to its range afterwards, so the functions are total over any input.
"""

import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, Mapping, Union

METRIC_MIN = 0.0
METRIC_MAX = 100.0
SKILLS_OVERLAP_MAX = 30.0
PERFORMANCE_SCORE_MAX = 50.0
RATING_MAX = 50.0  # 0-5 stars stored with one decimal, times ten


@dataclass(frozen=True)
class Preset:
    """A named set of weights applied to the four metrics."""

    name: str
    job_performance: float
    skills_experience: float
    responsiveness: float
    fairness_score: float
    rounded: bool = False

    @property
    def total_weight(self) -> float:
        return (
            self.job_performance
            + self.skills_experience
            + self.responsiveness
            + self.fairness_score
        )


# Freelancer cards and profile badges
DISPLAY = Preset("display", 0.40, 0.30, 0.20, 0.10, rounded=True)
# AI matching, ranking and the maintenance scripts
MATCHING = Preset("matching", 0.50, 0.20, 0.15, 0.15, rounded=False)

PRESETS: Dict[str, Preset] = {DISPLAY.name: DISPLAY, MATCHING.name: MATCHING}

PresetLike = Union[Preset, str]

_METRIC_ALIASES = {
    "job_performance": "jobPerformance",
    "skills_experience": "skillsExperience",
    "responsiveness": "responsiveness",
    "fairness_score": "fairnessScore",
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def _coerce(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except OverflowError:
        # Exact numbers (huge ints, Fractions) beyond float range
        return math.inf if value > 0 else -math.inf
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def clamp_metric(value: Any, low: float = METRIC_MIN, high: float = METRIC_MAX) -> float:
    """
    Coerce a loosely typed value to a number and clamp it to [low, high].

    None, NaN and non-numeric values become 0 (then clamped), numeric
    strings are parsed and infinities land on the nearest bound.
    """
    return max(low, min(high, _coerce(value)))


@dataclass(frozen=True)
class FreelancerMetrics:
    """The four performance metrics a match score is computed from."""

    job_performance: Any = 0
    skills_experience: Any = 0
    responsiveness: Any = 0
    fairness_score: Any = 0

    @classmethod
    def from_record(cls, record: Any) -> "FreelancerMetrics":
        """
        Build metrics from a mapping or an object with metric attributes.

        Both snake_case and camelCase keys are accepted; missing metrics are 0.
        """
        if isinstance(record, FreelancerMetrics):
            return record
        values = {}
        for name, alias in _METRIC_ALIASES.items():
            if isinstance(record, Mapping):
                value = record.get(name, record.get(alias))
            else:
                value = getattr(record, name, getattr(record, alias, None))
            values[name] = 0 if value is None else value
        return cls(**values)

    def clamped(self) -> "FreelancerMetrics":
        return FreelancerMetrics(
            **{f.name: clamp_metric(getattr(self, f.name)) for f in fields(self)}
        )

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-metric weighted contributions (fractions of 1) and the total score."""

    preset: str
    job_performance: float
    skills_experience: float
    responsiveness: float
    fairness_score: float
    total: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "jobPerformanceScore": self.job_performance,
            "skillsScore": self.skills_experience,
            "responsivenessScore": self.responsiveness,
            "fairnessScore": self.fairness_score,
        }


def get_preset(preset: PresetLike) -> Preset:
    if isinstance(preset, Preset):
        return preset
    try:
        return PRESETS[preset]
    except (KeyError, TypeError):
        raise ValueError(
            f"Unknown preset {preset!r}. Use one of: {', '.join(sorted(PRESETS))}"
        )


def _as_metrics(metrics: Any) -> FreelancerMetrics:
    if isinstance(metrics, FreelancerMetrics):
        return metrics
    return FreelancerMetrics.from_record(metrics)


def _weighted_terms(metrics: FreelancerMetrics, preset: Preset) -> Dict[str, float]:
    clamped = metrics.clamped()
    return {
        "job_performance": clamped.job_performance * preset.job_performance,
        "skills_experience": clamped.skills_experience * preset.skills_experience,
        "responsiveness": clamped.responsiveness * preset.responsiveness,
        "fairness_score": clamped.fairness_score * preset.fairness_score,
    }


def compute_match_score(
    metrics: Any,
    preset: PresetLike = MATCHING,
    rounded: Union[bool, None] = None,
) -> Union[int, float]:
    """
    Compute the weighted match score for one freelancer.

    Args:
        metrics: FreelancerMetrics, a mapping or a record with the four metrics
        preset: Preset instance or name ("display" or "matching")
        rounded: Round half-up to an int. None follows the preset
            (display rounds, matching keeps fractional precision)

    Returns:
        Score in [0, 100]
    """
    chosen = get_preset(preset)
    terms = _weighted_terms(_as_metrics(metrics), chosen)
    total = (
        terms["job_performance"]
        + terms["skills_experience"]
        + terms["responsiveness"]
        + terms["fairness_score"]
    )
    total = max(METRIC_MIN, min(METRIC_MAX, total))

    if rounded is None:
        rounded = chosen.rounded
    if rounded:
        return round_half_up(total)
    return total


def display_match_score(metrics: Any) -> int:
    """Integer badge score shown on freelancer cards."""
    return compute_match_score(metrics, DISPLAY, rounded=True)


def ranking_match_score(metrics: Any) -> float:
    """Unrounded matching score used to order candidates."""
    return compute_match_score(metrics, MATCHING, rounded=False)


def score_breakdown(metrics: Any, preset: PresetLike = MATCHING) -> ScoreBreakdown:
    chosen = get_preset(preset)
    metrics = _as_metrics(metrics)
    terms = _weighted_terms(metrics, chosen)
    return ScoreBreakdown(
        preset=chosen.name,
        job_performance=terms["job_performance"] / METRIC_MAX,
        skills_experience=terms["skills_experience"] / METRIC_MAX,
        responsiveness=terms["responsiveness"] / METRIC_MAX,
        fairness_score=terms["fairness_score"] / METRIC_MAX,
        total=compute_match_score(metrics, chosen, rounded=False),
    )


def _clean_skills(skills: Iterable[Any]) -> list:
    return [s.strip().lower() for s in skills if isinstance(s, str) and s.strip()]


def compute_skills_overlap_score(freelancer_skills: Any, requested_skills: Any) -> float:
    """
    Score how well a freelancer's skills cover the requested skills (0-30).

    A freelancer skill matches when it contains a requested skill or is
    contained in one, case-insensitively. The count of matching freelancer
    skills is divided by the number of requested skills (at least 1), so an
    empty request always scores 0.
    """
    if not isinstance(freelancer_skills, (list, tuple)) or not isinstance(
        requested_skills, (list, tuple)
    ):
        return 0.0

    have = _clean_skills(freelancer_skills)
    # Blank requests are dropped before counting, so they neither match
    # everything nor dilute the denominator
    wanted = _clean_skills(requested_skills)

    matching = [
        skill for skill in have
        if any(skill in req or req in skill for req in wanted)
    ]
    score = len(matching) / max(len(wanted), 1) * SKILLS_OVERLAP_MAX
    return min(SKILLS_OVERLAP_MAX, score)


def compute_performance_score(job_performance: Any, rating: Any) -> float:
    """
    Blend job performance (0-100) and rating (0-50) into a 0-50 point score.

    Both inputs are clamped; the rating is normalized to 0-100 and weighted
    equally with job performance.
    """
    performance = clamp_metric(job_performance)
    normalized_rating = clamp_metric(rating, high=RATING_MAX) / RATING_MAX * METRIC_MAX
    combined = performance * 0.5 + normalized_rating * 0.5
    return combined / METRIC_MAX * PERFORMANCE_SCORE_MAX
