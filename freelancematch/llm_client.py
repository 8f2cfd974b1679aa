"""
Client for the external AI service (DeepSeek or a local Ollama server).

Both expose an OpenAI-compatible chat-completions endpoint. The service is
treated as opaque: it receives the job and the candidate freelancers and
returns an analysis plus a list of suggested freelancer ids. Ranking is
done locally with the matching preset, never by the model's own numbers.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .errors import LLMError, LLMResponseError
from .logger import get_logger
from .match_score import clamp_metric
from .retry import RetryError, exponential_backoff, is_transient_error, should_retry_http_status

logger = get_logger()

_JSON_BLOCK_RE = re.compile(r"\{[\s\S]*\}")

JOB_ANALYSIS_SYSTEM_PROMPT = """You are an assistant for a freelance marketplace.
Analyze the job request and pick the freelancers from the list who best fit it.

Reply with ONLY a JSON object of this shape:
{
  "analysis": "Short analysis of the job request",
  "matches": [
    {"freelancerId": 1, "score": 0.95, "reasoning": "Why this freelancer fits"}
  ]
}"""


@dataclass
class CandidateSuggestion:
    freelancer_id: int
    score: float = 0.0
    reasoning: str = ""


@dataclass
class JobAnalysisReply:
    analysis: str
    suggestions: List[CandidateSuggestion] = field(default_factory=list)


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, requests.exceptions.HTTPError):
        if exc.response is None:
            return is_transient_error(exc)
        return should_retry_http_status(exc.response.status_code)
    return True


def _log_retry(attempt: int, exc: Exception, delay: float) -> None:
    logger.warning(f"AI request failed, retrying in {delay:.1f}s", attempt=attempt, error=str(exc))


@exponential_backoff(
    max_retries=2,
    base_delay=1.0,
    exceptions=(
        requests.exceptions.Timeout,
        requests.exceptions.ConnectionError,
        requests.exceptions.HTTPError,
    ),
    should_retry=_is_retryable,
    on_retry=_log_retry,
)
def _post_with_retry(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float):
    """POST with automatic retry on transient errors."""
    resp = requests.post(url, json=payload, headers=headers, timeout=timeout)
    resp.raise_for_status()
    return resp


def _error_detail(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return err["message"]
        if isinstance(err, str):
            return err
    return json.dumps(body)[:200]


def _to_llm_error(exc: Exception) -> LLMError:
    """Translate a requests failure into a user-facing LLMError."""
    if isinstance(exc, RetryError) and exc.__cause__ is not None:
        exc = exc.__cause__

    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        status = exc.response.status_code
        if status == 401:
            return LLMError("Invalid API key or authentication failure with the AI service.", status)
        if status == 429:
            return LLMError("Rate limit exceeded for the AI service.", status)
        return LLMError(f"AI service error ({status}): {_error_detail(exc.response)}", status)
    if isinstance(exc, requests.exceptions.Timeout):
        return LLMError("AI service timed out. Try again later.")
    return LLMError(f"Network error connecting to the AI service: {exc}")


def extract_json(text: str) -> Dict[str, Any]:
    """
    Parse the first JSON object embedded in a model reply.

    Models often wrap the object in prose or code fences, so everything
    between the first '{' and the last '}' is parsed.

    Raises:
        LLMResponseError: no object found or it does not parse
    """
    m = _JSON_BLOCK_RE.search(text or "")
    if not m:
        raise LLMResponseError("AI reply did not contain a JSON object")
    try:
        data = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"AI reply contained invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise LLMResponseError("AI reply JSON must be an object")
    return data


def parse_suggestions(raw_matches: Any) -> List[CandidateSuggestion]:
    """Suggestions from the reply's "matches" list; entries without a numeric id are dropped."""
    if not isinstance(raw_matches, list):
        return []
    suggestions = []
    for item in raw_matches:
        if not isinstance(item, dict):
            continue
        try:
            freelancer_id = int(item.get("freelancerId", item.get("freelancer_id")))
        except (TypeError, ValueError):
            continue
        reasoning = item.get("reasoning")
        suggestions.append(CandidateSuggestion(
            freelancer_id=freelancer_id,
            score=clamp_metric(item.get("score")),
            reasoning=reasoning if isinstance(reasoning, str) else "",
        ))
    return suggestions


def build_job_messages(description: str, skills: List[str], candidates: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    lines = [f'Job Request Description: "{description}"', ""]
    if skills:
        lines += [f"Required Skills: {', '.join(skills)}", ""]
    lines.append("Available Freelancers:")
    for c in candidates:
        lines += [
            "",
            f"Freelancer ID: {c.get('id')}",
            f"Name: {c.get('displayName') or 'Freelancer ' + str(c.get('id'))}",
            f"Profession: {c.get('profession')}",
            f"Skills: {', '.join(c.get('skills') or []) or 'Not specified'}",
            f"Experience: {c.get('yearsOfExperience') or 0} years",
            f"Hourly Rate: ${c.get('hourlyRate') or 0}",
            f"Location: {c.get('location') or 'Not specified'}",
            f"Bio: {c.get('bio') or 'Not provided'}",
            f"Job Performance: {c.get('jobPerformance') or 0}/100",
            f"Skills Experience: {c.get('skillsExperience') or 0}/100",
            f"Responsiveness: {c.get('responsiveness') or 0}/100",
            f"Fairness Score: {c.get('fairnessScore') or 0}/100",
        ]
    lines += ["", "Rank the freelancers that best fit this job, with reasoning for each."]
    return [
        {"role": "system", "content": JOB_ANALYSIS_SYSTEM_PROMPT},
        {"role": "user", "content": "\n".join(lines)},
    ]


class LLMClient:
    """Chat-completions client for DeepSeek or Ollama."""

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key or None
        self.model = model or None
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "LLMClient":
        return cls(
            api_url=settings.ai_api_url,
            api_key=settings.ai_api_key,
            model=settings.ai_model,
            timeout=settings.AI_TIMEOUT,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def check_availability(self) -> bool:
        """True when the service answers its model listing endpoint."""
        try:
            resp = requests.get(f"{self.api_url}/models", headers=self._headers(), timeout=5)
            return resp.status_code == 200
        except requests.exceptions.RequestException as e:
            logger.warning("AI service is not available", url=self.api_url, error=str(e))
            return False

    def chat(self, messages: List[Dict[str, str]], temperature: float = 0.2, max_tokens: int = 2048) -> str:
        """
        Send a conversation and return the assistant's reply text.

        Raises:
            LLMError: request failed after retries
            LLMResponseError: response had no reply content
        """
        payload: Dict[str, Any] = {
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if self.model:
            payload["model"] = self.model

        logger.record_llm_call()
        try:
            resp = _post_with_retry(
                f"{self.api_url}/chat/completions", payload, self._headers(), self.timeout
            )
        except (RetryError, requests.exceptions.RequestException) as e:
            error = _to_llm_error(e)
            logger.record_llm_failure(type(e.__cause__ or e).__name__)
            logger.error("AI request failed", url=self.api_url, error=str(error))
            raise error from e

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.record_llm_failure("MalformedResponse")
            raise LLMResponseError("AI service returned an unexpected response shape") from e
        return content or ""

    def analyze_job(self, description: str, skills: List[str], candidates: List[Dict[str, Any]]) -> JobAnalysisReply:
        """Ask the model to analyze a job and suggest freelancer ids from candidates."""
        reply = self.chat(build_job_messages(description, skills, candidates))
        result = extract_json(reply)
        analysis = result.get("analysis")
        return JobAnalysisReply(
            analysis=analysis if isinstance(analysis, str) and analysis else "Analysis not provided",
            suggestions=parse_suggestions(result.get("matches")),
        )
