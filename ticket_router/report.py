"""
Similarity report rendering.

Renders the most similar tickets as an HTML list that the ticket store can
show in a rich-text property.
"""

from html import escape
from typing import Sequence

from .config import DEFAULT_LINK_TEMPLATE
from .models import ScoredCandidate


DEFAULT_REPORT_SIZE = 3


def format_report_entry(
    candidate: ScoredCandidate,
    link_template: str,
    **link_params: str,
) -> str:
    """
    Render one ranked ticket as a list item.

    Args:
        candidate: Scored ticket to render.
        link_template: ``str.format`` template with a ``{ticket_id}`` placeholder.
        **link_params: Values for any other placeholders (e.g. ``portal_id``).

    Returns:
        A single ``<li>`` line with a link and the score to two decimals.
    """
    link = link_template.format(ticket_id=candidate.ticket_id, **link_params)
    return (
        f'<li><a href="{escape(link)}" target="_blank">{escape(candidate.display_name)}</a>'
        f" - Similarity score: {candidate.score:.2f}</li>\n"
    )


def format_similarity_report(
    ranked: Sequence[ScoredCandidate],
    link_template: str = DEFAULT_LINK_TEMPLATE,
    max_entries: int = DEFAULT_REPORT_SIZE,
    **link_params: str,
) -> str:
    """
    Render the top ranked tickets as an HTML list.

    The ranked order is kept as is. Fewer than ``max_entries`` tickets are all
    rendered; an empty ranking renders an empty list.

    Args:
        ranked: Candidates sorted by descending similarity.
        link_template: ``str.format`` template with a ``{ticket_id}`` placeholder.
        max_entries: Maximum number of tickets to list.
        **link_params: Values for any other placeholders in the template.

    Returns:
        ``<ul>...</ul>`` markup.

    Raises:
        ValueError: If ``max_entries`` is negative.
    """
    if max_entries < 0:
        raise ValueError("max_entries must not be negative")

    entries = [
        format_report_entry(candidate, link_template, **link_params)
        for candidate in ranked[:max_entries]
    ]
    return "<ul>" + "".join(entries) + "</ul>"
