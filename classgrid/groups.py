"""
Random group generator with repeat-pairing avoidance.

A roster of names is shuffled and dealt round-robin into groups. When a pair
history from earlier sessions is available, a small bounded random search
prefers partitions that repeat fewer (and less recent) pairings.

History format (oldest record first):

    [
        [["Alice", "Bob"], ["Cara", "Dan"]],   # pairs of one earlier session
        ...
    ]

Everything here is pure: the random source and the history are passed in,
and the caller decides when a result is accepted and recorded.
"""

from __future__ import annotations

import logging
import math
import random
from collections import defaultdict
from typing import Iterable, Optional, Sequence

from classgrid.model import ValidationError

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 20
DEFAULT_ATTEMPTS = 30

MODE_GROUPS = "groups"
MODE_PER_GROUP = "per-group"
MODES = (MODE_GROUPS, MODE_PER_GROUP)

Pair = tuple[str, str]
Groups = list[list[str]]


def parse_names(text: str) -> list[str]:
    """
    One name per line; lines are trimmed and blank lines dropped.
    Duplicate names are kept (they are different people).
    """
    return [line.strip() for line in text.splitlines() if line.strip()]


def shuffle_names(names: Sequence[str], rng: random.Random) -> list[str]:
    """
    Return a uniformly shuffled copy of names (Fisher-Yates via Random.shuffle).
    """
    shuffled = list(names)
    rng.shuffle(shuffled)
    return shuffled


def deal_groups(names: Sequence[str], group_count: int, rng: random.Random) -> Groups:
    """
    Shuffle, then deal names round-robin into group_count groups.
    Group sizes differ by at most one.
    """
    groups: Groups = [[] for _ in range(group_count)]
    for i, name in enumerate(shuffle_names(names, rng)):
        groups[i % group_count].append(name)
    return groups


def extract_pairs(groups: Iterable[Sequence[str]]) -> list[Pair]:
    """
    Every unordered pair of names sharing a group, as a sorted tuple.
    """
    pairs: list[Pair] = []
    for g in groups:
        for i in range(len(g)):
            for j in range(i + 1, len(g)):
                a, b = sorted((g[i], g[j]))
                pairs.append((a, b))
    return pairs


def _pair_weights(history: Sequence[Iterable[Sequence[str]]]) -> dict[Pair, int]:
    """
    Map each historical pair to the summed weight of the records containing it.

    Records are oldest first; record h weighs h + 1, so the most recent
    session counts the most. A pair listed twice in one record counts once.
    """
    weights: dict[Pair, int] = defaultdict(int)
    for h, record in enumerate(history):
        seen: set[Pair] = set()
        for pair in record:
            if len(pair) != 2:
                continue
            a, b = sorted((str(pair[0]), str(pair[1])))
            seen.add((a, b))
        for p in seen:
            weights[p] += h + 1
    return weights


def pair_score(groups: Groups, history: Sequence[Iterable[Sequence[str]]]) -> int:
    """
    Repeat-pairing score of a partition against the history (lower is better).
    """
    weights = _pair_weights(history)
    return sum(weights.get(p, 0) for p in extract_pairs(groups))


def partition(
    names: Sequence[str],
    group_count: int,
    history: Sequence[Iterable[Sequence[str]]] = (),
    rng: Optional[random.Random] = None,
    attempts: int = DEFAULT_ATTEMPTS,
) -> Groups:
    """
    Split names into group_count random groups.

    Without history the first shuffled partition is returned as is. With
    history, up to `attempts` candidates are generated and the lowest-scoring
    one wins; ties keep the earlier candidate and a zero score stops the search.
    """
    if len(names) < 2:
        raise ValidationError("Enter at least 2 names.")
    if group_count < 1:
        raise ValidationError("Group count must be at least 1.")

    rng = rng if rng is not None else random.Random()

    best = deal_groups(names, group_count, rng)
    if not history:
        return best

    weights = _pair_weights(history)

    def score(groups: Groups) -> int:
        return sum(weights.get(p, 0) for p in extract_pairs(groups))

    best_score = score(best)
    tried = 1
    while best_score > 0 and tried < attempts:
        candidate = deal_groups(names, group_count, rng)
        tried += 1
        s = score(candidate)
        if s < best_score:
            best, best_score = candidate, s

    logger.debug("partition: %d candidates tried, best score %d", tried, best_score)
    return best


def compute_group_count(mode: str, requested: int, name_count: int) -> int:
    """
    Turn the user's setting into a number of groups.

    - "groups":    min(requested, name_count), never more groups than people
    - "per-group": ceil(name_count / requested), so no group is larger than
                   `requested` (7 names, 3 per group -> 3 groups of 3,2,2)
    """
    if requested < 1:
        raise ValidationError("Group setting must be a positive number.")
    if mode == MODE_GROUPS:
        return min(requested, name_count)
    if mode == MODE_PER_GROUP:
        return max(1, math.ceil(name_count / requested))
    raise ValidationError(f"Unknown group mode: {mode!r}")


def record_history(
    history: Sequence[Iterable[Sequence[str]]], groups: Groups, window: int = HISTORY_WINDOW
) -> list[list[list[str]]]:
    """
    Append the pairs of an accepted partition and keep the last `window` records.
    """
    out = [[list(p) for p in record] for record in history]
    out.append([list(p) for p in extract_pairs(groups)])
    return out[-window:] if window > 0 else []


def move_member(groups: Groups, src_group: int, src_index: int, dst_group: int, dst_index: int) -> Groups:
    """
    Move one name to another position (possibly in another group).

    Returns a new partition; raises IndexError for positions that do not exist.
    """
    if not (0 <= src_group < len(groups)) or not (0 <= dst_group < len(groups)):
        raise IndexError("group index out of range")
    if not (0 <= src_index < len(groups[src_group])):
        raise IndexError("member index out of range")

    out = [list(g) for g in groups]
    moved = out[src_group].pop(src_index)
    dst_index = max(0, min(dst_index, len(out[dst_group])))
    out[dst_group].insert(dst_index, moved)
    return out
