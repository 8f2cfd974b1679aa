import math
from numbers import Real
from typing import Any, Dict, List

REQUIRED_FREELANCER_STR_FIELDS = ["profession", "bio", "location"]
OPTIONAL_FREELANCER_STR_FIELDS = ["username", "email", "display_name", "image_url"]
NUMERIC_FREELANCER_FIELDS = [
    "job_performance",
    "skills_experience",
    "responsiveness",
    "fairness_score",
    "rating",
    "hourly_rate",
    "completed_jobs",
    "years_of_experience",
]

MIN_DESCRIPTION_LENGTH = 10


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_number(v: Any) -> bool:
    """Finite real number; JSON NaN and Infinity are rejected."""
    if isinstance(v, bool) or not isinstance(v, Real):
        return False
    try:
        return math.isfinite(v)
    except OverflowError:
        # Integers past float range are still finite
        return True


def _is_str_list(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(s, str) for s in v)


def validate_freelancer(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.

    Metric values outside 0-100 are accepted here; scoring clamps them.
    """
    errors: List[str] = []
    if not isinstance(data, dict):
        return ["Freelancer record must be a JSON object"]

    for f in REQUIRED_FREELANCER_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in OPTIONAL_FREELANCER_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if "skills" not in data:
        errors.append("Missing required field: skills")
    elif not _is_str_list(data["skills"]):
        errors.append("Field 'skills' must be a list of strings")
    elif not any(s.strip() for s in data["skills"]):
        errors.append("Field 'skills' must contain at least one skill")

    for f in NUMERIC_FREELANCER_FIELDS:
        if data.get(f) is not None and not _is_number(data[f]):
            errors.append(f"Field '{f}' must be a finite number if provided")

    if "availability" in data and not isinstance(data["availability"], bool):
        errors.append("Field 'availability' must be true or false if provided")

    return errors


def validate_job_request(data: Dict[str, Any]) -> List[str]:
    """Returns a list of validation error messages for a job matching request."""
    errors: List[str] = []
    if not isinstance(data, dict):
        return ["Job request must be a JSON object"]

    description = data.get("description")
    if not isinstance(description, str):
        errors.append("Missing required field: description")
    elif len(description.strip()) < MIN_DESCRIPTION_LENGTH:
        errors.append(
            f"Job description must be at least {MIN_DESCRIPTION_LENGTH} characters"
        )

    if data.get("skills") is not None and not _is_str_list(data["skills"]):
        errors.append("Field 'skills' must be a list of strings if provided")

    if data.get("budget") is not None and not _is_number(data["budget"]):
        errors.append("Field 'budget' must be a finite number if provided")

    for f in ("timeline", "preferred_location"):
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    return errors
