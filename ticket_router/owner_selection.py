"""
Owner selection strategies.

An owner selector turns a ranked candidate list into a single owner
recommendation. Selectors are interchangeable: the router only relies on
``select(ranked) -> Optional[str]``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from .models import ScoredCandidate


logger = logging.getLogger(__name__)


def distinct_owners(ranked: Iterable[ScoredCandidate]) -> list[str]:
    """Owner ids in order of first appearance."""
    seen: set[str] = set()
    owners = []
    for candidate in ranked:
        if candidate.owner_id not in seen:
            seen.add(candidate.owner_id)
            owners.append(candidate.owner_id)
    return owners


class OwnerSelector(ABC):
    """Strategy that recommends an owner from a ranked candidate list."""

    @abstractmethod
    def select(self, ranked: Sequence[ScoredCandidate]) -> Optional[str]:
        """
        Recommend an owner.

        Args:
            ranked: Candidates sorted by descending similarity.

        Returns:
            Owner id, or None when there is no recommendation.
        """


class MostSimilarOwnerSelector(OwnerSelector):
    """
    Picks the owner of the most similar ticket.

    Optionally ignores candidates below a minimum score and skips owners
    who should not receive new tickets, falling through to the next most
    similar owner.
    """

    def __init__(
        self,
        min_score: Optional[float] = None,
        unavailable_owners: Iterable[str] = (),
    ):
        """
        Args:
            min_score: Candidates scoring below this are ignored.
            unavailable_owners: Owner ids that must be skipped.
        """
        self.min_score = min_score
        self.unavailable_owners = frozenset(unavailable_owners)

    def select(self, ranked: Sequence[ScoredCandidate]) -> Optional[str]:
        eligible = ranked
        if self.min_score is not None:
            eligible = [c for c in eligible if c.score >= self.min_score]

        for owner_id in distinct_owners(eligible):
            if owner_id in self.unavailable_owners:
                logger.debug(f"Skipping unavailable owner {owner_id}")
                continue
            return owner_id

        logger.info(f"No owner recommendation from {len(ranked)} ranked candidates")
        return None
