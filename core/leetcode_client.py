"""LeetCode data API client with connection reuse and retry logic."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception,
    before_sleep_log
)

from core.exceptions import NotFound, UpstreamUnavailable

logger = logging.getLogger(__name__)


def _is_retryable_error(exc: Exception) -> bool:
    """
    Determine if an exception is retryable.

    Only retries on:
    - Timeouts
    - Server errors (5xx)
    - Connection errors without a response

    Does NOT retry on client errors (4xx).
    """
    if isinstance(exc, requests.Timeout):
        return True

    if isinstance(exc, requests.HTTPError):
        response = getattr(exc, 'response', None)
        if response is not None:
            return response.status_code >= 500
        return True

    if isinstance(exc, requests.RequestException):
        response = getattr(exc, 'response', None)
        if response is not None and 400 <= response.status_code < 500:
            return False
        return True

    return False


class LeetCodeClient:
    """
    Client for an alfa-leetcode-api compatible service.

    Responsibilities:
    - Own a requests.Session for connection reuse
    - Bound every call with a timeout and retry transient failures
    - Map failures onto NotFound / UpstreamUnavailable

    All payloads are returned as decoded JSON and treated as untrusted.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        request_timeout_seconds: float = 10.0,
        max_attempts: int = 3,
        retry_backoff_seconds: float = 1.0,
        problem_list_limit: int = 3000
    ):
        self.base_url = (base_url or "http://localhost:3000").rstrip("/")
        self.request_timeout_seconds = request_timeout_seconds
        self.problem_list_limit = problem_list_limit

        self.session = requests.Session()
        self._retrying = Retrying(
            stop=stop_after_attempt(max(1, max_attempts)),
            wait=wait_fixed(retry_backoff_seconds),
            retry=retry_if_exception(_is_retryable_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )

        logger.info(
            f"LeetCodeClient initialized: base_url={self.base_url}, "
            f"timeout={request_timeout_seconds}s, attempts={max_attempts}"
        )

    def _request_once(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        response = self.session.get(url, params=params, timeout=self.request_timeout_seconds)
        if response.status_code == 404:
            raise NotFound(f"Upstream resource not found: {path}")
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"Malformed JSON from {path}", response.status_code) from e

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``path`` with retries; the raw decoded payload is returned."""
        try:
            return self._retrying.copy()(self._request_once, path, params)
        except requests.RequestException as e:
            response = getattr(e, 'response', None)
            status_code = response.status_code if response is not None else None
            logger.warning(f"Upstream request failed for {path}: {e}")
            raise UpstreamUnavailable(f"Upstream request failed for {path}: {e}", status_code) from e

    # ---- problems ----

    def get_problem_list(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Return the problemsetQuestionList entries (possibly empty)."""
        data = self.get_json("/problems", params={"limit": limit or self.problem_list_limit})
        if not isinstance(data, dict):
            return []
        questions = data.get("problemsetQuestionList") or []
        return [q for q in questions if isinstance(q, dict)]

    def get_problem_detail(self, title_slug: str) -> Dict[str, Any]:
        data = self.get_json("/select", params={"titleSlug": title_slug})
        if not isinstance(data, dict) or not data or data.get("errors"):
            raise NotFound(f"Problem details not found: {title_slug}")
        return data

    def get_problem_stats(self, title_slug: str) -> Dict[str, Any]:
        data = self.get_json(f"/problems/{quote(title_slug, safe='')}/stats")
        return data if isinstance(data, dict) else {}

    def get_daily_problem(self) -> Dict[str, Any]:
        data = self.get_json("/daily")
        if not isinstance(data, dict):
            raise UpstreamUnavailable("Daily problem payload was not an object")
        return data

    # ---- users ----

    def _user_path(self, template: str, username: str) -> str:
        return template.format(username=quote(username, safe=''))

    def get_user_profile(self, username: str) -> Any:
        return self.get_json(self._user_path("/{username}", username))

    def get_user_solved(self, username: str) -> Any:
        return self.get_json(self._user_path("/{username}/solved", username))

    def get_user_contest(self, username: str) -> Any:
        return self.get_json(self._user_path("/{username}/contest", username))

    def get_language_stats(self, username: str) -> Any:
        return self.get_json("/languageStats", params={"username": username})

    def get_skill_stats(self, username: str) -> Any:
        return self.get_json(self._user_path("/skillStats/{username}", username))

    def get_full_profile(self, username: str) -> Any:
        return self.get_json(self._user_path("/userProfile/{username}", username))

    def get_accepted_submissions(self, username: str, limit: int = 20) -> Any:
        return self.get_json(self._user_path("/{username}/acSubmission", username), params={"limit": limit})

    def ping(self) -> bool:
        """Best-effort reachability check used at startup."""
        try:
            self.get_json("/")
            return True
        except (UpstreamUnavailable, NotFound) as e:
            logger.warning(f"LeetCode API not reachable at {self.base_url}: {e}")
            return False

    def close(self) -> None:
        self.session.close()
