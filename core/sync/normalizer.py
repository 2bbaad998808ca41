"""
Problem normalization - merge the detail, list and stats payloads into one
record with ProblemDTO field names.

Every upstream field is optional; numbers fall back to zero, tag lists are
deduplicated by name, premium defaults to False.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from core.exceptions import NotFound
from core.utils import dedupe_tags, parse_float, parse_int, parse_json_list

logger = logging.getLogger(__name__)

ENGAGEMENT_FIELDS = ('likes', 'dislikes')


def find_list_entry(
    problem_list: Optional[List[Dict[str, Any]]],
    question_id: Optional[int] = None,
    title_slug: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """Linear scan of the problem list by frontend id or slug."""
    for entry in problem_list or []:
        if question_id is not None and str(entry.get('frontendQuestionId', '')).strip() == str(question_id):
            return entry
        if title_slug is not None and entry.get('titleSlug') == title_slug:
            return entry
    return None


def has_engagement(payload: Optional[Dict[str, Any]]) -> bool:
    if not payload:
        return False
    return any(payload.get(f) is not None for f in ENGAGEMENT_FIELDS)


def _embedded_stats(detail: Dict[str, Any]) -> Dict[str, Any]:
    """The detail payload may carry a JSON-encoded "stats" string."""
    stats = detail.get('stats')
    if isinstance(stats, dict):
        return stats
    if isinstance(stats, str) and stats.strip():
        try:
            decoded = json.loads(stats)
        except ValueError:
            logger.debug(f"Ignoring undecodable stats string on '{detail.get('titleSlug')}'")
            return {}
        return decoded if isinstance(decoded, dict) else {}
    return {}


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None and value != '':
            return value
    return None


def normalize_problem(
    title_slug: str,
    detail: Dict[str, Any],
    list_entry: Optional[Dict[str, Any]] = None,
    stats: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Build the record to score and store.

    Raises NotFound when no question id can be resolved from any payload.
    """
    entry = list_entry or {}
    stats = stats or {}
    embedded = _embedded_stats(detail)

    question_id = parse_int(_first_present(
        entry.get('frontendQuestionId'),
        detail.get('questionFrontendId'),
        detail.get('questionId'),
    ))
    if question_id <= 0:
        raise NotFound(f"Could not resolve a question id for '{title_slug}'")

    acceptance = _first_present(
        entry.get('acRate'),
        stats.get('acRate'),
        detail.get('acRate'),
        embedded.get('acRate'),
    )

    total_submissions = parse_int(_first_present(
        stats.get('totalSubmissions'),
        entry.get('totalSubmitted'),
        detail.get('totalSubmitted'),
        entry.get('totalSubmissions'),
        detail.get('totalSubmissions'),
        embedded.get('totalSubmissionRaw'),
        entry.get('totalAccepted'),
        detail.get('totalAccepted'),
    ))

    if acceptance is None:
        logger.debug(f"No acceptance rate for '{title_slug}', storing 0")
    if not (has_engagement(entry) or has_engagement(stats) or has_engagement(detail)):
        logger.debug(f"No likes/dislikes for '{title_slug}', storing 0")

    raw_hints = detail.get('hints')
    hints = [str(h) for h in raw_hints if h is not None] if isinstance(raw_hints, list) else []

    return {
        'question_id': question_id,
        'title_slug': detail.get('titleSlug') or title_slug,
        'title': _first_present(detail.get('questionTitle'), detail.get('title'), entry.get('title')) or title_slug,
        'difficulty': _first_present(entry.get('difficulty'), detail.get('difficulty')),
        'content': detail.get('content') or detail.get('question') or '',
        'hints': hints,
        'similar_questions': parse_json_list(detail.get('similarQuestions')),
        'tags': dedupe_tags(entry.get('topicTags') or detail.get('topicTags') or []),
        'topic_tags': dedupe_tags(detail.get('topicTags') or entry.get('topicTags') or []),
        'likes': max(0, parse_int(_first_present(entry.get('likes'), stats.get('likes'), detail.get('likes')))),
        'dislikes': max(0, parse_int(_first_present(entry.get('dislikes'), stats.get('dislikes'), detail.get('dislikes')))),
        'acceptance_rate': min(100.0, max(0.0, parse_float(acceptance))),
        'total_submissions': max(0, total_submissions),
        'is_premium': bool(entry.get('isPaidOnly') or detail.get('isPaidOnly') or False),
    }
