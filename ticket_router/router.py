"""
Routing entry point.

Combines ranking, owner selection, report rendering and patch composition
into a single decision for one ticket. The caller fetches the embedding and
candidates beforehand and persists the returned patch afterwards; nothing
here performs I/O.
"""

import logging
from typing import Optional, Sequence

from .config import RoutingConfig
from .models import Candidate, TicketEvent, UpdatePatch
from .owner_selection import MostSimilarOwnerSelector, OwnerSelector
from .ranking import rank_candidates
from .report import format_similarity_report
from .update_composer import compose_update


logger = logging.getLogger(__name__)


class TicketRouter:
    """
    Routes a ticket to the owner of its most similar predecessor.

    Holds no per-ticket state; one instance can route any number of tickets.
    """

    def __init__(
        self,
        config: Optional[RoutingConfig] = None,
        selector: Optional[OwnerSelector] = None,
    ):
        """
        Args:
            config: Routing configuration. Defaults are read from the environment.
            selector: Owner selection strategy. Defaults to the most similar
                owner, honouring the configured score floor and unavailable owners.
        """
        self._config = config or RoutingConfig()
        self._selector = selector or MostSimilarOwnerSelector(
            min_score=self._config.min_score,
            unavailable_owners=self._config.unavailable_owners,
        )

    def route(
        self,
        ticket: TicketEvent,
        embedding: Sequence[float],
        candidates: Sequence[Candidate],
    ) -> UpdatePatch:
        """
        Decide the owner and similarity report for a ticket.

        Args:
            ticket: The ticket being routed.
            embedding: Embedding of the ticket's subject and content.
            candidates: Previously-owned tickets to compare against.

        Returns:
            Patch holding the embedding, the similarity report and, if the
            ticket had no owner and one could be recommended, the new owner.

        Raises:
            DimensionMismatchError: If a candidate embedding differs in length.
            DegenerateVectorError: If a zero-magnitude embedding is compared.
        """
        ranked = rank_candidates(
            embedding,
            candidates,
            tie_break=self._config.tie_break,
            exclude_ticket_id=ticket.ticket_id,
        )

        new_owner = None
        if ticket.has_owner():
            logger.info(
                f"Ticket {ticket.ticket_id} already owned by {ticket.owner_id}, "
                f"keeping owner"
            )
        else:
            new_owner = self._selector.select(ranked)
            if new_owner:
                logger.info(f"Ticket {ticket.ticket_id} routed to owner {new_owner}")

        report = format_similarity_report(
            ranked,
            link_template=self._config.link_template,
            max_entries=self._config.report_size,
            portal_id=ticket.portal_id or "",
        )

        return compose_update(
            embedding=embedding,
            owner_id=new_owner,
            report=report,
        )


def route(
    ticket: TicketEvent,
    embedding: Sequence[float],
    candidates: Sequence[Candidate],
    config: Optional[RoutingConfig] = None,
    selector: Optional[OwnerSelector] = None,
) -> UpdatePatch:
    """Route a single ticket with a one-off TicketRouter."""
    return TicketRouter(config, selector).route(ticket, embedding, candidates)
