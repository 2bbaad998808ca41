#!/usr/bin/env python3
"""
Problem Scorers - interchangeable implementations of the secondary (AI) score.

- GenerativeProblemScorer: asks an LLM for {"score", "reason"}
- MathematicalFallbackScorer: deterministic, reuses the mathematical score
- FallbackScorer: tries the primary, falls back on ScoringDegraded and stops
  calling the primary for a while after repeated failures
"""

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Mapping, Optional

from core.exceptions import ScoringDegraded
from core.llm.interfaces import LLMProvider
from core.llm.system_prompts import PROBLEM_RATING_SYSTEM_PROMPT, build_problem_rating_message
from core.scorer.mathematical import mathematical_score, MIN_SCORE, MAX_SCORE
from core.scorer.models import AIRating, ScoringInputs

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 100
FALLBACK_REASON = "AI unavailable — using mathematical score"


def extract_json_object(text: str) -> Optional[str]:
    """Return the first balanced {...} block in text, ignoring braces inside strings."""
    if not text:
        return None

    start = text.find('{')
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == '\\':
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == '{':
                depth += 1
            elif ch == '}':
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        # Unbalanced from this brace; try the next one
        start = text.find('{', start + 1)
    return None


def parse_rating_response(text: str) -> AIRating:
    """Parse an LLM reply into an AIRating or raise ScoringDegraded."""
    block = extract_json_object(text)
    if block is None:
        raise ScoringDegraded("No JSON object in AI response")

    try:
        payload = json.loads(block)
    except ValueError as e:
        raise ScoringDegraded(f"Malformed JSON in AI response: {e}") from e
    if not isinstance(payload, dict):
        raise ScoringDegraded("AI response JSON is not an object")

    raw_score = payload.get('score')
    if isinstance(raw_score, bool):
        raise ScoringDegraded(f"Invalid AI score: {raw_score!r}")
    try:
        score = float(raw_score)
    except (TypeError, ValueError) as e:
        raise ScoringDegraded(f"Invalid AI score: {raw_score!r}") from e
    if score != score:  # NaN
        raise ScoringDegraded("AI score is NaN")

    score = max(MIN_SCORE, min(MAX_SCORE, score))
    reason = str(payload.get('reason') or "AI analysis completed").strip()
    return AIRating(score=score, reason=reason[:MAX_REASON_LENGTH])


class ProblemScorer(ABC):
    """A source of the secondary 1-5 score for a problem."""

    @abstractmethod
    def score(self, inputs: ScoringInputs) -> AIRating:
        pass


class GenerativeProblemScorer(ProblemScorer):
    def __init__(self, llm: LLMProvider):
        self.llm = llm

    def score(self, inputs: ScoringInputs) -> AIRating:
        message = build_problem_rating_message(
            title=inputs.title,
            difficulty=inputs.difficulty,
            tags=inputs.tags,
            likes=inputs.likes,
            dislikes=inputs.dislikes,
            acceptance_rate=inputs.acceptance_rate,
        )
        try:
            reply = self.llm.generate_text(PROBLEM_RATING_SYSTEM_PROMPT, message)
        except Exception as e:
            raise ScoringDegraded(f"AI provider failed: {e}") from e
        return parse_rating_response(reply)


class MathematicalFallbackScorer(ProblemScorer):
    def __init__(self, tag_weights: Mapping[str, float]):
        self.tag_weights = tag_weights

    def score(self, inputs: ScoringInputs) -> AIRating:
        value = mathematical_score(
            likes=inputs.likes,
            dislikes=inputs.dislikes,
            acceptance_rate=inputs.acceptance_rate,
            question_number=inputs.question_number,
            max_question_id=inputs.max_question_id,
            difficulty=inputs.difficulty,
            tags=inputs.tags,
            tag_weights=self.tag_weights,
        )
        return AIRating(score=value, reason=FALLBACK_REASON, degraded=True)


class FallbackScorer(ProblemScorer):
    """
    Try the primary scorer, use the fallback when it degrades.

    After ``failure_threshold`` consecutive failures the primary is skipped
    until ``reset_timeout_seconds`` have passed; the next call then tries it
    once (half-open) while concurrent callers keep using the fallback, and a
    success closes the circuit again.
    """

    def __init__(
        self,
        primary: ProblemScorer,
        fallback: ProblemScorer,
        failure_threshold: int = 3,
        reset_timeout_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self.primary = primary
        self.fallback = fallback
        self.failure_threshold = max(1, failure_threshold)
        self.reset_timeout_seconds = reset_timeout_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._consecutive_failures = 0
        self._opened_at: Optional[float] = None
        self._probing = False

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._is_open_locked()

    def _is_open_locked(self) -> bool:
        if self._opened_at is None:
            return False
        return self._clock() - self._opened_at < self.reset_timeout_seconds

    def _allow_primary(self) -> bool:
        """True when this caller may call the primary; claims the single half-open trial."""
        with self._lock:
            if self._opened_at is None:
                return True
            if self._probing or self._is_open_locked():
                return False
            self._probing = True
            return True

    def _record_success(self) -> None:
        with self._lock:
            self._consecutive_failures = 0
            self._opened_at = None
            self._probing = False

    def _record_failure(self) -> None:
        with self._lock:
            self._probing = False
            self._consecutive_failures += 1
            if self._consecutive_failures >= self.failure_threshold:
                if self._opened_at is None or not self._is_open_locked():
                    logger.warning(
                        f"AI scorer failed {self._consecutive_failures} times in a row, "
                        f"skipping it for {self.reset_timeout_seconds:.0f}s"
                    )
                self._opened_at = self._clock()

    def score(self, inputs: ScoringInputs) -> AIRating:
        if not self._allow_primary():
            return self.fallback.score(inputs)

        try:
            rating = self.primary.score(inputs)
        except ScoringDegraded as e:
            logger.warning(f"AI scoring degraded for '{inputs.title}': {e}")
            self._record_failure()
            return self.fallback.score(inputs)
        except BaseException:
            with self._lock:
                self._probing = False
            raise

        self._record_success()
        return rating
