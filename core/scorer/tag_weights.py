"""
Tag-importance table for the mathematical score.

The table is read-only and handed to the scorer explicitly, so tests and
deployments can swap in their own weights without touching module state.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional

DEFAULT_TAG_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "Dynamic Programming": 1.2,
    "Graph": 1.2,
    "System Design": 1.3,
    "Array": 1.0,
    "String": 0.9,
    "Hash Table": 1.0,
    "Math": 0.8,
    "Parsing": 0.6,
    "Tree": 1.1,
    "Binary Tree": 1.1,
    "Depth-First Search": 1.1,
    "Breadth-First Search": 1.1,
    "Binary Search": 1.0,
    "Two Pointers": 1.0,
    "Sliding Window": 1.1,
    "Backtracking": 1.2,
    "Greedy": 1.1,
    "Heap (Priority Queue)": 1.2,
    "Stack": 0.9,
    "Queue": 0.9,
    "Linked List": 1.0,
    "Sorting": 0.9,
    "Bit Manipulation": 1.1,
    "Trie": 1.2,
    "Union Find": 1.3,
    "Segment Tree": 1.4,
    "Binary Indexed Tree": 1.4,
})

UNLISTED_TAG_WEIGHT = 1.0


def build_tag_weights(overrides: Optional[Dict[str, float]] = None) -> Mapping[str, float]:
    """Merge config overrides over the defaults into a new read-only map."""
    merged = dict(DEFAULT_TAG_WEIGHTS)
    for name, weight in (overrides or {}).items():
        merged[name] = float(weight)
    return MappingProxyType(merged)
