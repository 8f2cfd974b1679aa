import re
from typing import Any, Iterable, List, Optional

STOPWORDS = {"with", "this", "that", "have", "from", "they", "will", "what", "when", "where", "your"}
MIN_TERM_LENGTH = 4

_BIO_NAME_RE = re.compile(r"^([A-Za-z\s]+)\s+is\s+a\s+")


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_skills(skills: Optional[Iterable[Any]]) -> List[str]:
    """Lowercase skills, dropping blanks, non-strings and duplicates (order kept)."""
    if not skills:
        return []
    seen = set()
    result = []
    for skill in skills:
        if not isinstance(skill, str):
            continue
        s = normalize_text(skill)
        if s and s not in seen:
            seen.add(s)
            result.append(s)
    return result


def description_terms(description: str) -> List[str]:
    """Meaningful lowercase terms of a job description."""
    return [
        term for term in (description or "").lower().split()
        if len(term) >= MIN_TERM_LENGTH and term not in STOPWORDS
    ]


def skills_match(a: str, b: str) -> bool:
    """True when either lowercase string contains the other."""
    a, b = a.lower(), b.lower()
    return a in b or b in a


def extract_freelancer_name(
    bio: Optional[str],
    display_name: Optional[str],
    freelancer_id: Any,
) -> str:
    """
    Pick a display name for a freelancer.

    Priority: the user's display name, then a leading "<Name> is a ..." in
    the bio, then "Freelancer <id>".
    """
    if display_name:
        return display_name
    if bio:
        m = _BIO_NAME_RE.match(bio)
        if m and m.group(1).strip():
            return m.group(1).strip()
    return f"Freelancer {freelancer_id}"
