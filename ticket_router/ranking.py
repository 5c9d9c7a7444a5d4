"""
Similarity ranking of candidate tickets.

Candidates are scored against the query embedding and sorted by descending
similarity. Python's sort is stable, so candidates with equal scores keep
the order in which the search returned them unless an explicit
secondary key is requested.
"""

import logging
from typing import Iterable, Optional, Sequence

from .models import Candidate, ScoredCandidate
from .similarity import cosine_similarity


logger = logging.getLogger(__name__)


def score_candidate(query: Sequence[float], candidate: Candidate) -> ScoredCandidate:
    """Compute the similarity between the query and one candidate."""
    return ScoredCandidate(
        ticket_id=candidate.ticket_id,
        owner_id=candidate.owner_id,
        display_name=candidate.display_name,
        score=cosine_similarity(query, candidate.embedding),
    )


def rank_candidates(
    query: Sequence[float],
    candidates: Iterable[Candidate],
    tie_break: str = "input",
    exclude_ticket_id: Optional[str] = None,
) -> list[ScoredCandidate]:
    """
    Rank candidates by cosine similarity to the query, most similar first.

    Tie-break policy:
        - ``"input"``: candidates with equal scores keep their input order
          (stable sort). The search order therefore decides ties.
        - ``"ticket_id"``: ties are ordered by ticket id, ascending, which
          makes the ranking independent of the search order.

    Args:
        query: Embedding of the ticket being routed.
        candidates: Previously-owned tickets with stored embeddings.
        tie_break: Tie-break policy, see above.
        exclude_ticket_id: Id of the ticket being routed. Excluding it is the
            search's job; it is only used here to flag a leak.

    Returns:
        One ScoredCandidate per input candidate, sorted by descending score.

    Raises:
        DimensionMismatchError: If any candidate embedding differs in length
            from the query. No partial ranking is returned.
        DegenerateVectorError: If the query or any candidate embedding has
            zero magnitude.
        ValueError: If the tie-break policy is unknown.
    """
    if tie_break not in ("input", "ticket_id"):
        raise ValueError(f"Unknown tie-break policy: {tie_break!r}")

    scored = [score_candidate(query, candidate) for candidate in candidates]

    if exclude_ticket_id and any(c.ticket_id == exclude_ticket_id for c in scored):
        logger.warning(
            f"Ticket {exclude_ticket_id} is among its own candidates; "
            f"search should have excluded it"
        )

    if tie_break == "ticket_id":
        # Sort by the secondary key first; the stable primary sort keeps it for ties
        scored.sort(key=lambda c: c.ticket_id)

    ranked = sorted(scored, key=lambda c: c.score, reverse=True)

    logger.debug(
        f"Ranked {len(ranked)} candidates"
        + (f", best {ranked[0].ticket_id} ({ranked[0].score:.2f})" if ranked else "")
    )

    return ranked
