"""
AI job-matching service.

Responsibilities:
- Turn a job request into a ranked, top-N list of freelancer matches.
- Ask the external AI service for candidates when one is configured,
  falling back to local content matching when it is not reachable.
- Build human-readable match reasons and per-metric score breakdowns.

Non-Responsibilities:
- No score formula of its own: metric weighting lives in match_score.
- No persistence beyond reading freelancers.

Invariant:
For the same stored freelancers and the same request, local matching
returns the same ranking.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .database import Freelancer
from .errors import LLMError, NoFreelancersError
from .llm_client import LLMClient
from .logger import get_logger
from .match_score import (
    MATCHING,
    METRIC_MAX,
    METRIC_MIN,
    ScoreBreakdown,
    compute_skills_overlap_score,
    ranking_match_score,
    round_half_up,
    score_breakdown,
)
from .normalize import description_terms, normalize_skills, normalize_text, skills_match
from .schema import validate_job_request
from .storage import get_display_name, list_freelancers

logger = get_logger()

DEFAULT_TOP_N = 3
MIN_DETAILED_WORDS = 10
MAX_CLARIFYING_QUESTIONS = 3

PROFESSION_MENTIONED_POINTS = 40
PROFESSION_TERM_POINTS = 30
SKILLS_CONTENT_POINTS = 30
CONTENT_WEIGHT = 0.7
METRICS_WEIGHT = 0.3

DEFAULT_FOLLOW_UPS = [
    "What hourly rate should I expect to pay for this type of work?",
    "How long might this project take to complete?",
    "What additional information should I provide to these freelancers?",
]


@dataclass
class JobRequest:
    description: str
    skills: List[str] = field(default_factory=list)
    budget: Optional[float] = None
    timeline: Optional[str] = None
    preferred_location: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobRequest":
        return cls(
            description=data.get("description", ""),
            skills=list(data.get("skills") or []),
            budget=data.get("budget"),
            timeline=data.get("timeline"),
            preferred_location=data.get("preferred_location"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "skills": self.skills,
            "budget": self.budget,
            "timeline": self.timeline,
            "preferred_location": self.preferred_location,
        }


@dataclass
class FreelancerMatch:
    freelancer_id: int
    score: float
    match_reasons: List[str]
    breakdown: ScoreBreakdown
    ranking_score: float = 0.0
    freelancer: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "freelancerId": self.freelancer_id,
            "score": self.score,
            "matchReasons": list(self.match_reasons),
            **self.breakdown.to_dict(),
            "freelancer": self.freelancer,
        }


@dataclass
class MatchResult:
    job_analysis: Dict[str, Any]
    matches: List[FreelancerMatch] = field(default_factory=list)
    suggested_questions: List[str] = field(default_factory=list)
    needs_more_info: bool = False
    source: str = "local"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobAnalysis": self.job_analysis,
            "matches": [m.to_dict() for m in self.matches],
            "suggestedQuestions": list(self.suggested_questions),
            "needsMoreInfo": self.needs_more_info,
        }


# Clarifying questions

def _mentions(text: str, *words: str) -> bool:
    return any(w in text for w in words)


def needs_clarification(description: str) -> bool:
    """True when a request is too short or lacks budget, timeline or skill details."""
    text = (description or "").lower()
    if len(text.split()) < MIN_DETAILED_WORDS:
        return True
    missing = [
        not _mentions(text, "budget", "pay", "cost", "price"),
        not _mentions(text, "timeline", "deadline", "due", " by "),
        not _mentions(text, "skill", "experience", "qualified"),
    ]
    return any(missing)


def clarifying_questions(description: str) -> List[str]:
    text = (description or "").lower()
    questions = []
    if not _mentions(text, "budget", "pay", "cost"):
        questions.append("What is your budget for this project?")
    if not _mentions(text, "timeline", "deadline", "due"):
        questions.append("What is your timeline or deadline for this project?")
    if not _mentions(text, "skill", "experience"):
        questions.append("What specific skills or experience are you looking for in a freelancer?")
    if not _mentions(text, "scope", "deliverable"):
        questions.append("Can you describe the scope and deliverables for this project in more detail?")
    if not _mentions(text, "location", "language", "remote"):
        questions.append("Do you have any requirements regarding freelancer location, working hours, or language?")
    return questions[:MAX_CLARIFYING_QUESTIONS]


# Local content scoring

def matched_skills(freelancer_skills: List[str], requested: List[str], terms: List[str]) -> List[str]:
    """Freelancer skills (original casing) matching a requested skill or a description term."""
    wanted = normalize_skills(requested) + terms
    return [
        skill for skill in freelancer_skills or []
        if isinstance(skill, str) and skill.strip()
        and any(skills_match(skill.strip(), w) for w in wanted)
    ]


def content_score(freelancer: Freelancer, job: JobRequest) -> float:
    """
    Points for how well a profile reads against the job text (0-70).

    Profession named in the description: 40, else any description term
    inside the profession: 30. Skills: share of the freelancer's skills
    matching requested skills or description terms, times 30.
    """
    description = (job.description or "").lower()
    terms = description_terms(job.description)
    profession = normalize_text(freelancer.profession or "")

    score = 0.0
    if profession and profession in description:
        score += PROFESSION_MENTIONED_POINTS
    elif profession and any(term in profession for term in terms):
        score += PROFESSION_TERM_POINTS

    skills = freelancer.skills or []
    matches = matched_skills(skills, job.skills, terms)
    score += len(matches) / max(len(skills), 1) * SKILLS_CONTENT_POINTS
    return score


def local_match_score(freelancer: Freelancer, job: JobRequest) -> int:
    """Blend of content points (70%) and the matching-preset metric score (30%)."""
    blended = content_score(freelancer, job) * CONTENT_WEIGHT + ranking_match_score(freelancer) * METRICS_WEIGHT
    return int(max(METRIC_MIN, min(METRIC_MAX, round_half_up(blended))))


def build_match_reasons(name: str, freelancer: Freelancer, job: JobRequest) -> List[str]:
    reasons = []
    performance = freelancer.job_performance or 0
    if performance > 90:
        reasons.append(f"{name} has exceptional job performance ratings ({performance}%)")
    elif performance > 80:
        reasons.append(f"{name} has strong job performance ratings ({performance}%)")

    skills = matched_skills(freelancer.skills, job.skills, description_terms(job.description))
    if skills:
        suffix = "..." if len(skills) > 3 else ""
        reason = f"Skills match: {', '.join(skills[:3])}{suffix}"
        if job.skills:
            overlap = compute_skills_overlap_score(freelancer.skills, job.skills)
            reason += f" ({overlap:.0f}/30 skill overlap)"
        reasons.append(reason)

    if freelancer.years_of_experience and freelancer.years_of_experience > 5:
        reasons.append(f"{freelancer.years_of_experience} years of professional experience")

    if job.preferred_location and freelancer.location:
        if normalize_text(job.preferred_location) in normalize_text(freelancer.location):
            reasons.append(f"Located in {freelancer.location}")
    return reasons


def rank_candidates(scored: List[Tuple[float, Freelancer]], top_n: int = DEFAULT_TOP_N) -> List[Tuple[float, Freelancer]]:
    """
    Order (score, freelancer) pairs best first and keep the top N.

    Ties are broken by the unrounded matching score, then by lower id.
    """
    ordered = sorted(
        scored,
        key=lambda pair: (-pair[0], -ranking_match_score(pair[1]), pair[1].id),
    )
    return ordered[:max(top_n, 0)]


class MatchingService:
    """Matches job requests against stored freelancers."""

    def __init__(self, session, llm_client: Optional[LLMClient] = None, top_n: int = DEFAULT_TOP_N):
        self.session = session
        self.llm_client = llm_client
        self.top_n = top_n

    def _freelancers(self) -> List[Freelancer]:
        freelancers = list_freelancers(self.session)
        if not freelancers:
            raise NoFreelancersError("No freelancers available in the database for matching")
        return freelancers

    def _to_match(self, score: float, freelancer: Freelancer, job: JobRequest, extra_reason: str = "") -> FreelancerMatch:
        name = get_display_name(self.session, freelancer)
        reasons = build_match_reasons(name, freelancer, job)
        if extra_reason:
            reasons.insert(0, extra_reason)
        details = freelancer.to_dict()
        details["displayName"] = name
        return FreelancerMatch(
            freelancer_id=freelancer.id,
            score=score,
            match_reasons=reasons,
            breakdown=score_breakdown(freelancer, MATCHING),
            ranking_score=ranking_match_score(freelancer),
            freelancer=details,
        )

    def _analysis(self, job: JobRequest, text: str, **extra: Any) -> Dict[str, Any]:
        return {"description": job.description, "skills": job.skills, "analysisText": text, **extra}

    def match_locally(self, job: JobRequest) -> MatchResult:
        """Rank every stored freelancer by local content + metric score."""
        freelancers = self._freelancers()
        scored = [(local_match_score(f, job), f) for f in freelancers]
        top = rank_candidates(scored, self.top_n)
        logger.record_match_request(len(freelancers))
        logger.info("Local matching complete", candidates=len(freelancers), returned=len(top))

        matches = [self._to_match(score, f, job) for score, f in top]
        return MatchResult(
            job_analysis=self._analysis(job, _local_analysis_text(job, len(matches))),
            matches=matches,
            suggested_questions=(
                clarifying_questions(job.description)
                if needs_clarification(job.description) else list(DEFAULT_FOLLOW_UPS)
            ),
            source="local",
        )

    def match_with_ai(self, job: JobRequest) -> MatchResult:
        """
        Ask the AI service for candidates and rank them with the matching preset.

        Suggested ids that do not exist in storage are skipped.

        Raises:
            LLMError: the AI service failed or replied with unusable output
        """
        if self.llm_client is None:
            raise LLMError("No AI client configured")
        freelancers = self._freelancers()
        by_id = {f.id: f for f in freelancers}
        candidates = []
        for f in freelancers:
            details = f.to_dict()
            details["displayName"] = get_display_name(self.session, f)
            candidates.append(details)

        reply = self.llm_client.analyze_job(job.description, job.skills, candidates)

        reasons: Dict[int, str] = {}
        scored = []
        for suggestion in reply.suggestions:
            freelancer = by_id.get(suggestion.freelancer_id)
            if freelancer is None:
                logger.warning("AI suggested unknown freelancer", freelancer_id=suggestion.freelancer_id)
                continue
            if freelancer.id in reasons:
                continue
            reasons[freelancer.id] = suggestion.reasoning or "Strong match for this job request"
            scored.append((ranking_match_score(freelancer), freelancer))

        top = rank_candidates(scored, self.top_n)
        logger.record_match_request(len(scored))
        logger.info("AI matching complete", suggested=len(reply.suggestions), returned=len(top))

        return MatchResult(
            job_analysis=self._analysis(job, reply.analysis),
            matches=[self._to_match(score, f, job, reasons[f.id]) for score, f in top],
            suggested_questions=[
                "What skills are most important for this job?",
                "Can you explain more about the job requirements?",
                "What is the typical timeframe for this kind of project?",
            ],
            source="ai",
        )

    def process_job_request(self, job: JobRequest, use_ai: bool = True) -> MatchResult:
        """
        Match a job request, preferring the AI service when available.

        A vague request sent to the AI path returns clarifying questions
        and no matches. AI failures fall back to local matching.

        Raises:
            ValueError: invalid job request
            NoFreelancersError: nothing stored to match against
        """
        errors = validate_job_request(job.to_dict())
        if errors:
            raise ValueError("; ".join(errors))

        if not use_ai or self.llm_client is None:
            return self.match_locally(job)

        if needs_clarification(job.description):
            questions = clarifying_questions(job.description)
            if questions:
                logger.info("Returning clarifying questions", count=len(questions))
                return MatchResult(
                    job_analysis=self._analysis(
                        job,
                        "I need a bit more information about your job requirements "
                        "to find the best freelancers for you.",
                        needsMoreInfo=True,
                    ),
                    suggested_questions=questions,
                    needs_more_info=True,
                    source="ai",
                )

        if not self.llm_client.check_availability():
            logger.record_fallback()
            logger.warning("AI service unavailable, using local matching")
            return self.match_locally(job)

        try:
            return self.match_with_ai(job)
        except LLMError as e:
            logger.record_fallback()
            logger.error("AI matching failed, using local matching", error=str(e))
            return self.match_locally(job)


def _local_analysis_text(job: JobRequest, found: int) -> str:
    text = job.description.lower()
    if "develop" in text:
        focus = "development"
    elif "design" in text:
        focus = "design"
    elif "write" in text or "content" in text:
        focus = "content writing"
    else:
        focus = "professional"
    analysis = f"Based on your job description, you're looking for {focus} expertise. "
    if job.skills:
        analysis += f"Key skills required include {', '.join(job.skills)}. "
    analysis += f"I've found {found} qualified freelancers in the platform database who match your requirements."
    return analysis
