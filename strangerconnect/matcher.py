from enum import Enum
from typing import FrozenSet, Optional, Sequence

from .queues import ANY, Filters, Profile, QueueEntry


class MatchPolicy(str, Enum):
    FIRST_FIT = "first-fit"
    JACCARD = "jaccard"


def interests_compatible(mine: FrozenSet[str], theirs: FrozenSet[str]) -> bool:
    # Nobody declared anything -> open pool
    if not mine or not theirs:
        return True
    return not mine.isdisjoint(theirs)


def _field_ok(wanted: str, actual: Optional[str]) -> bool:
    if wanted == ANY or actual is None:
        return True
    return wanted == actual


def filters_accept(desired: Filters, profile: Profile) -> bool:
    """
    Checks a desired filter against someone's self profile.
    Fields the profile leaves unknown are accepted.
    """
    return _field_ok(desired.country, profile.country) and \
        _field_ok(desired.gender, profile.gender)


def jaccard_similarity(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def _acceptable(requester: QueueEntry, candidate: QueueEntry) -> bool:
    if candidate.identity == requester.identity:
        return False
    if not filters_accept(requester.desired, candidate.profile):
        return False
    # Reciprocal: the candidate must want me too
    return filters_accept(candidate.desired, requester.profile)


def find_match(
    requester: QueueEntry,
    candidates: Sequence[QueueEntry],
    policy: MatchPolicy = MatchPolicy.FIRST_FIT,
) -> Optional[QueueEntry]:
    """
    Picks a partner for `requester` out of `candidates` (head of queue first).

    FIRST_FIT returns the earliest candidate that shares an interest (or where
    either side declared none) and passes both filter checks.

    JACCARD ranks every filter-compatible candidate by interest similarity and
    returns the best one. Ties, including the case where nobody declared
    interests, go to whoever has waited longest.
    """
    if policy == MatchPolicy.JACCARD:
        best, best_score = None, -1.0
        for candidate in candidates:
            if not _acceptable(requester, candidate):
                continue
            score = jaccard_similarity(requester.interests, candidate.interests)
            if score > best_score:
                best, best_score = candidate, score
        return best

    for candidate in candidates:
        if not _acceptable(requester, candidate):
            continue
        if not interests_compatible(requester.interests, candidate.interests):
            continue
        return candidate
    return None
