"""
Composition of the sparse ticket update.

Only fields with a value are included, so an update with nothing to say is
an empty patch and can be applied unconditionally.
"""

import json
from typing import Optional, Sequence

from .models import UpdatePatch


EMBEDDING_PROPERTY = "ticket_ai_embeddings"
OWNER_PROPERTY = "hubspot_owner_id"
REPORT_PROPERTY = "similar_tickets"


def serialize_embedding(embedding: Sequence[float]) -> str:
    """Encode an embedding as compact JSON array text."""
    return json.dumps([float(x) for x in embedding], separators=(",", ":"))


def compose_update(
    embedding: Optional[Sequence[float]] = None,
    owner_id: Optional[str] = None,
    report: Optional[str] = None,
) -> UpdatePatch:
    """
    Build the patch of ticket properties to persist.

    Args:
        embedding: Embedding of the ticket, stored for future comparisons.
        owner_id: Newly selected owner. Empty strings count as absent.
        report: Rendered similarity report.

    Returns:
        Mapping containing only the properties whose input was given.
    """
    properties: UpdatePatch = {}

    if embedding is not None:
        properties[EMBEDDING_PROPERTY] = serialize_embedding(embedding)

    if owner_id:
        properties[OWNER_PROPERTY] = owner_id

    if report is not None:
        properties[REPORT_PROPERTY] = report

    return properties
