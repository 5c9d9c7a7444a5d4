"""
HubSpot ticket store for the Similar-Ticket Owner Router.

Responsible for the two CRM calls around a routing decision:
- Searching previously-owned tickets that already carry an embedding
- Writing the computed properties back to the routed ticket
"""

import json
import logging
import math
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .config import HubSpotConfig
from .models import Candidate, Ticket, UpdatePatch
from .update_composer import EMBEDDING_PROPERTY, OWNER_PROPERTY


logger = logging.getLogger(__name__)


SEARCH_PROPERTIES = [
    "subject",
    "content",
    "hs_object_id",
    OWNER_PROPERTY,
    EMBEDDING_PROPERTY,
]


class TicketStoreError(Exception):
    """Base exception for ticket store errors."""
    pass


class SearchError(TicketStoreError):
    """Error when searching for candidate tickets."""
    pass


class UpdateError(TicketStoreError):
    """Error when writing properties to a ticket."""
    pass


def build_search_request(exclude_ticket_id: Optional[str], limit: int) -> dict[str, Any]:
    """
    Build the CRM search body for candidate tickets.

    Only tickets that have both an embedding and an owner are returned;
    the routed ticket itself is excluded when its id is known.

    Args:
        exclude_ticket_id: Id of the ticket being routed.
        limit: Maximum number of results.

    Returns:
        JSON-serializable search body.
    """
    filters = [
        {"propertyName": EMBEDDING_PROPERTY, "operator": "HAS_PROPERTY"},
        {"propertyName": OWNER_PROPERTY, "operator": "HAS_PROPERTY"},
    ]

    if exclude_ticket_id:
        filters.append({
            "propertyName": "hs_object_id",
            "operator": "NEQ",
            "value": exclude_ticket_id,
        })

    return {
        "limit": limit,
        "properties": SEARCH_PROPERTIES,
        "filterGroups": [{"filters": filters}],
    }


def parse_ticket(result: dict[str, Any]) -> Ticket:
    """
    Convert one search result into a Ticket.

    Raises:
        ValueError: If the result has no ticket id, or the stored embedding
            is not a JSON array of finite numbers.
    """
    properties = result.get("properties") or {}
    ticket_id = properties.get("hs_object_id") or result.get("id")
    if ticket_id is None or not str(ticket_id).strip():
        raise ValueError("search result has no ticket id")

    raw_embedding = properties.get(EMBEDDING_PROPERTY)
    embedding = json.loads(raw_embedding) if raw_embedding else None
    if embedding is not None and not isinstance(embedding, list):
        raise ValueError("embedding is not a JSON array")
    # json.loads accepts NaN and Infinity literals
    if embedding and any(isinstance(x, float) and not math.isfinite(x) for x in embedding):
        raise ValueError("embedding contains NaN or infinite values")

    return Ticket(
        ticket_id=str(ticket_id).strip(),
        subject=properties.get("subject") or "",
        content=properties.get("content") or "",
        owner_id=str(properties.get(OWNER_PROPERTY) or "") or None,
        embedding=embedding,
    )


def parse_candidate(result: dict[str, Any]) -> Optional[Candidate]:
    """
    Convert one search result into a Candidate.

    Returns:
        Candidate, or None if the result has no usable owner or embedding.
    """
    try:
        return parse_ticket(result).to_candidate()
    except (ValueError, ValidationError) as e:
        # json.JSONDecodeError is a ValueError
        ticket_id = (result.get("properties") or {}).get("hs_object_id") or result.get("id")
        logger.warning(f"Skipping malformed candidate ticket {ticket_id}: {e}")
        return None


class HubSpotTicketStore:
    """
    Client for the HubSpot CRM tickets API.

    Searches candidate tickets and applies property patches. Must be used as
    a context manager so the HTTP connection is closed after each decision.
    """

    def __init__(self, config: HubSpotConfig):
        """
        Initialize the ticket store.

        Args:
            config: HubSpot configuration with base URL and access token.
        """
        self._config = config
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> "HubSpotTicketStore":
        """Context manager entry."""
        self._client = httpx.Client(
            base_url=self._config.api_base_url,
            timeout=self._config.request_timeout,
            headers={
                "Authorization": f"Bearer {self._config.access_token}",
                "Content-Type": "application/json",
            },
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        if self._client:
            self._client.close()
            self._client = None

    def _require_client(self) -> httpx.Client:
        if not self._client:
            raise RuntimeError("Ticket store must be used within a context manager")
        return self._client

    def find_candidates(self, exclude_ticket_id: Optional[str] = None) -> list[Candidate]:
        """
        Search previously-owned tickets that carry an embedding.

        Args:
            exclude_ticket_id: Id of the ticket being routed.

        Returns:
            Candidates in the order the search returned them.

        Raises:
            SearchError: If the search request fails.
        """
        client = self._require_client()
        body = build_search_request(exclude_ticket_id, self._config.search_limit)

        logger.info(f"Searching candidate tickets (excluding {exclude_ticket_id})")

        try:
            response = client.post("/crm/v3/objects/tickets/search", json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error searching tickets: {e}")
            raise SearchError(f"HTTP error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Request error searching tickets: {e}")
            raise SearchError(f"Request failed: {str(e)}") from e
        except ValueError as e:
            logger.error(f"Invalid search response: {e}")
            raise SearchError(f"Invalid response: {str(e)}") from e

        results = data.get("results") or []
        candidates = []
        for result in results:
            candidate = parse_candidate(result)
            if candidate is not None:
                candidates.append(candidate)

        logger.info(f"Found {len(candidates)} candidate tickets ({len(results)} results)")
        return candidates

    def apply_patch(self, ticket_id: str, patch: UpdatePatch) -> dict[str, Any]:
        """
        Write properties to a ticket.

        Args:
            ticket_id: Id of the ticket to update.
            patch: Properties to set; other properties are left untouched.

        Returns:
            The updated ticket as returned by the API.

        Raises:
            UpdateError: If the update request fails.
        """
        client = self._require_client()

        logger.info(f"Updating ticket {ticket_id} with {sorted(patch)}")

        try:
            response = client.patch(
                f"/crm/v3/objects/tickets/{ticket_id}",
                json={"properties": patch},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error updating ticket {ticket_id}: {e.response.text}")
            raise UpdateError(f"HTTP error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Request error updating ticket {ticket_id}: {e}")
            raise UpdateError(f"Request failed: {str(e)}") from e
        except ValueError as e:
            logger.error(f"Invalid update response for ticket {ticket_id}: {e}")
            raise UpdateError(f"Invalid response: {str(e)}") from e
