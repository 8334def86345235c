"""
Voting Queue Builder
====================

Derives, from the directory and the session, the randomly ordered list of
members the current user may still vote on. The queue is never stored:
it is rebuilt whenever its inputs change and consumed from the front.
"""

from typing import Iterable, List, Optional, Sequence

import numpy as np

from .models import Candidate


def fisher_yates_shuffle(
    items: Sequence,
    rng: Optional[np.random.Generator] = None
) -> list:
    """
    Uniform random permutation of ``items`` (input is left untouched).

    Args:
        items: Items to shuffle
        rng: Random generator; a fresh unseeded one if omitted
    """
    rng = rng if rng is not None else np.random.default_rng()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def eligible_candidates(
    candidates: Iterable[Candidate],
    current_user: Optional[str],
    voted_ids: Iterable[str]
) -> List[Candidate]:
    """Members other than the current user that have not been voted on yet."""
    voted = set(voted_ids)
    return [
        c for c in candidates
        if not c.matches_handle(current_user) and c.id not in voted
    ]


def build_voting_queue(
    candidates: Iterable[Candidate],
    current_user: Optional[str],
    voted_ids: Iterable[str],
    rng: Optional[np.random.Generator] = None
) -> List[Candidate]:
    """
    Build the voting queue for the current user.

    Args:
        candidates: Full directory
        current_user: Logged-in handle (excluded, case-insensitive)
        voted_ids: Ids already voted on this session
        rng: Random generator for the shuffle

    Returns:
        Eligible candidates in random order; the first one is the next target
    """
    return fisher_yates_shuffle(
        eligible_candidates(candidates, current_user, voted_ids),
        rng=rng,
    )
