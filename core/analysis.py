"""
Problem analysis - recommendation, solving-time estimate, learning outcomes
and per-user topic progress, all derived from stored problem data.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from core.utils import parse_int, round_half_up, tag_name

logger = logging.getLogger(__name__)

DO_THRESHOLD = 3.5
OK_THRESHOLD = 2.5
MISSING_SCORE = 3.0

# difficulty -> (base minutes, minutes added at 0% acceptance)
SOLVING_TIME_BUCKETS = {
    'easy': (15, 20),
    'medium': (30, 45),
    'hard': (60, 90),
}
DEFAULT_SOLVING_TIME = 45

SKILL_LEVELS = ('fundamental', 'intermediate', 'advanced')

TOPIC_DESCRIPTIONS = {
    'Array': 'Learn array manipulation, indexing, and common array algorithms',
    'String': 'Master string processing, pattern matching, and text algorithms',
    'Hash Table': 'Understand hashing concepts and efficient lookup operations',
    'Dynamic Programming': 'Learn optimization techniques and memoization strategies',
    'Math': 'Practice mathematical problem-solving and number theory',
    'Sorting': 'Master various sorting algorithms and their applications',
    'Greedy': 'Learn greedy algorithm design and optimization strategies',
    'Depth-First Search': 'Understand DFS traversal and graph exploration',
    'Binary Search': 'Master binary search technique and its variations',
    'Tree': 'Learn tree data structures and traversal algorithms',
    'Breadth-First Search': 'Understand BFS traversal and shortest path algorithms',
    'Two Pointers': 'Master two-pointer technique for array problems',
    'Binary Tree': 'Learn binary tree operations and traversals',
    'Heap (Priority Queue)': 'Understand heap data structure and priority operations',
    'Stack': 'Master stack operations and LIFO principle applications',
    'Backtracking': 'Learn recursive problem-solving with backtracking',
    'Simulation': 'Practice step-by-step problem simulation',
    'Graph': 'Understand graph algorithms and network problems',
    'Design': 'Learn system design and data structure implementation',
    'Linked List': 'Master linked list operations and pointer manipulation',
}


def recommendation(mathematical_score: Optional[float]) -> str:
    """'do' at >= 3.5, 'ok' at >= 2.5, otherwise 'pass'. Missing scores count as 3.0."""
    score = MISSING_SCORE if mathematical_score is None else mathematical_score
    if score >= DO_THRESHOLD:
        return 'do'
    if score >= OK_THRESHOLD:
        return 'ok'
    return 'pass'


def recommendation_reason(rec: str, mathematical_score: Optional[float]) -> str:
    score = MISSING_SCORE if mathematical_score is None else mathematical_score
    text = f"{score:.1f}/5.0"
    if rec == 'do':
        return f"Highly recommended! Mathematical score: {text} - excellent problem quality."
    if rec == 'ok':
        return f"Worth solving. Mathematical score: {text} - decent problem quality."
    if rec == 'pass':
        return f"Consider skipping. Mathematical score: {text} - may have issues."
    return "No specific recommendation available."


def estimated_solving_time(difficulty: Optional[str], acceptance_rate: float) -> int:
    """Minutes, linear in (1 - acceptance) within each difficulty bucket."""
    bucket = SOLVING_TIME_BUCKETS.get((difficulty or '').strip().lower())
    if bucket is None:
        return DEFAULT_SOLVING_TIME
    base, spread = bucket
    ratio = (acceptance_rate or 0.0) / 100
    return int(round_half_up(base + (1 - ratio) * spread))


def topic_description(name: str) -> str:
    return TOPIC_DESCRIPTIONS.get(name, f"Learn concepts related to {name}")


def learning_outcomes(topics: Iterable[str]) -> List[Dict[str, str]]:
    return [{'name': t, 'description': topic_description(t)} for t in topics]


def like_ratio_percent(likes: int, dislikes: int) -> int:
    return int(round_half_up(likes / (likes + dislikes + 1) * 100))


def popularity_score(mathematical_score: Optional[float]) -> int:
    """Mathematical score on a 0-100 scale."""
    score = MISSING_SCORE if mathematical_score is None else mathematical_score
    return int(round_half_up(score * 20))


def flatten_skill_stats(skill_stats: Any) -> List[Dict[str, Any]]:
    """Flatten a skillStats payload into [{tagName, tagSlug, problemsSolved, level}].

    Accepts both the raw GraphQL shape (data.matchedUser.tagProblemCounts)
    and an already unwrapped matchedUser / tagProblemCounts object.
    """
    if not isinstance(skill_stats, dict):
        return []

    node = skill_stats
    if isinstance(node.get('data'), dict):
        node = node['data']
    if isinstance(node.get('matchedUser'), dict):
        node = node['matchedUser']
    if isinstance(node.get('tagProblemCounts'), dict):
        node = node['tagProblemCounts']

    skills = []
    for level in SKILL_LEVELS:
        for skill in node.get(level) or []:
            if not isinstance(skill, dict) or not skill.get('tagName'):
                continue
            skills.append({
                'tagName': skill['tagName'],
                'tagSlug': skill.get('tagSlug'),
                'problemsSolved': parse_int(skill.get('problemsSolved')),
                'level': level,
            })
    return skills


def overall_skill_level(skills: List[Dict[str, Any]]) -> str:
    levels = {s['level'] for s in skills}
    if 'advanced' in levels:
        return 'Advanced'
    if 'intermediate' in levels:
        return 'Intermediate'
    return 'Beginner'


def user_progress(topics: List[str], skills: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Overlap between a problem's topics and the user's skill tags."""
    by_name = {}
    for skill in skills:
        by_name.setdefault(skill['tagName'], skill)

    matching = [
        {
            'name': topic,
            'problemsSolved': by_name[topic]['problemsSolved'],
            'level': by_name[topic]['level'],
        }
        for topic in topics if topic in by_name
    ]
    return {
        'hasExperience': bool(matching),
        'matchingTopics': matching,
        'solvedSimilarCount': len(matching),
        'totalUserTopics': len(by_name),
        'skillLevel': overall_skill_level(skills),
    }


def problem_topics(topic_tags: Iterable[Any]) -> List[str]:
    return [n for n in (tag_name(t) for t in topic_tags or []) if n]
