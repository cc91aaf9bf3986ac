"""Detect paths whose generated method names would collide.

Paths form a tree by segment. Two paths produce the same method name only when
they end in the same leaf, so a colliding group is resolved by peeling trailing
segments until the group's leaves diverge. Whatever was peeled has to be folded
into the generated names.

Examples:
  /rest/external/facility/create
  /rest/external/provider/create       -> collide on "create", separated one
                                          segment up (facility / provider)
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set


def split_path(path: str) -> List[str]:
    """Non-empty segments of a path template, braces kept."""
    return [segment for segment in path.split("/") if segment]


def deparameterize(segment: str) -> str:
    return segment.replace("{", "").replace("}", "")


def leaf_segment(path: str) -> Optional[str]:
    segments = split_path(path)
    if not segments:
        return None
    return deparameterize(segments[-1])


def _colliding_indices(segment_lists: Sequence[Sequence[str]]) -> Set[int]:
    groups: Dict[str, List[int]] = defaultdict(list)
    for index, segments in enumerate(segment_lists):
        if not segments:
            continue
        groups[deparameterize(segments[-1])].append(index)

    colliding: Set[int] = set()
    for indices in groups.values():
        if len(indices) > 1:
            colliding.update(indices)
    return colliding


def find_colliding_indices(paths: Sequence[str]) -> Set[int]:
    """Indices of every path sharing its leaf segment with at least one other path."""
    return _colliding_indices([split_path(path) for path in paths])


def escalation_depth(paths: Sequence[str]) -> int:
    """Index, on the longest path, of the last segment that makes the group unique."""
    if not paths:
        raise ValueError("escalation_depth needs at least one path")

    pending = sorted((split_path(path) for path in paths), key=len, reverse=True)
    depth = len(pending[0]) - 1

    while _colliding_indices(pending):
        pending = [segments[:-1] for segments in pending]
        depth -= 1

    return depth


def required_escalation(paths: Sequence[str], depth: Optional[int] = None) -> int:
    """Trailing segments beyond the default name needed to separate ``paths``.

    Counted on the longest member rather than the newest path, and never less
    than 1, so a shorter path registered after a longer one still escalates.
    """
    if depth is None:
        depth = escalation_depth(paths)
    longest = max(len(split_path(path)) for path in paths)
    return max(longest - 1 - depth, 1)


def collision_group(paths: Sequence[str], path: str) -> List[str]:
    """Members of ``paths`` that collide with ``path`` on its leaf, in input order."""
    colliding = find_colliding_indices(paths)
    leaf = leaf_segment(path)
    return [
        candidate
        for index, candidate in enumerate(paths)
        if index in colliding and leaf_segment(candidate) == leaf
    ]
