"""
Data models for the Similar-Ticket Owner Router.

Uses Pydantic for data validation. Ranking results are frozen; they are
built once per routing decision and never modified afterwards.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


EmbeddingVector = list[float]

# Field name -> value; only fields that were explicitly set are present
UpdatePatch = dict[str, str]


class Ticket(BaseModel):
    """
    A ticket as stored in the ticket store.

    Attributes:
        ticket_id: Unique identifier for the ticket
        subject: Ticket name
        content: Ticket description
        owner_id: Id of the assigned owner, if any
        embedding: Stored semantic embedding, if any
    """

    ticket_id: str = Field(..., description="Unique ticket identifier")
    subject: str = Field(default="", description="Ticket name")
    content: str = Field(default="", description="Ticket description")
    owner_id: Optional[str] = Field(default=None, description="Assigned owner id")
    embedding: Optional[EmbeddingVector] = Field(
        default=None,
        description="Stored semantic embedding"
    )

    model_config = {"frozen": True}

    def to_candidate(self) -> "Candidate":
        """
        Use this ticket as a comparison point for routing.

        Raises:
            ValueError: If the ticket has no owner or no embedding.
        """
        if not self.owner_id:
            raise ValueError(f"Ticket {self.ticket_id} has no owner")
        if not self.embedding:
            raise ValueError(f"Ticket {self.ticket_id} has no embedding")

        return Candidate(
            ticket_id=self.ticket_id,
            owner_id=self.owner_id,
            display_name=self.subject,
            embedding=self.embedding,
        )


class Candidate(BaseModel):
    """A previously-owned ticket used as a comparison point."""

    ticket_id: str = Field(..., description="Candidate ticket identifier")
    owner_id: str = Field(..., min_length=1, description="Owner of the candidate ticket")
    display_name: str = Field(default="", description="Name shown in the report")
    embedding: EmbeddingVector = Field(..., description="Stored embedding")

    model_config = {"frozen": True}


class ScoredCandidate(BaseModel):
    """A candidate together with its similarity to the routed ticket."""

    ticket_id: str
    owner_id: str
    display_name: str = ""
    score: float = Field(..., ge=-1.0, le=1.0)

    model_config = {"frozen": True}


class TicketEvent(BaseModel):
    """
    Structured input for one routing decision.

    Replaces the loose ``inputFields`` bag of a workflow event with the
    fields the router actually understands.
    """

    ticket_id: str = Field(..., min_length=1, description="Id of the ticket being routed")
    subject: str = Field(default="", description="Ticket name")
    content: str = Field(default="", description="Ticket description")
    owner_id: Optional[str] = Field(default=None, description="Current owner, if any")
    portal_id: Optional[str] = Field(default=None, description="Portal the ticket lives in")

    model_config = {"frozen": True}

    @field_validator("ticket_id", "owner_id", "portal_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Any) -> Any:
        """Ids arrive as numbers or strings; store them as stripped strings."""
        if v is None:
            return None
        return str(v).strip()

    @field_validator("owner_id")
    @classmethod
    def empty_owner_is_none(cls, v: Optional[str]) -> Optional[str]:
        """An empty owner field means the ticket is unassigned."""
        return v or None

    def has_owner(self) -> bool:
        """Check if the ticket already has an owner assigned."""
        return bool(self.owner_id)

    @classmethod
    def from_workflow_event(cls, event: dict) -> "TicketEvent":
        """
        Build a TicketEvent from a HubSpot workflow action payload.

        Args:
            event: Raw event with ``inputFields`` and ``origin`` sections.

        Returns:
            Parsed TicketEvent.

        Raises:
            ValueError: If the event or one of its sections is not a JSON
                object, or the ticket id is missing.
        """
        if not isinstance(event, dict):
            raise ValueError(f"workflow event must be a JSON object, got {type(event).__name__}")

        fields = event.get("inputFields") or {}
        origin = event.get("origin") or {}
        for name, section in (("inputFields", fields), ("origin", origin)):
            if not isinstance(section, dict):
                raise ValueError(f"workflow event {name} must be a JSON object")

        return cls(
            ticket_id=fields.get("hs_ticket_id", ""),
            subject=fields.get("subject") or "",
            content=fields.get("content") or "",
            owner_id=fields.get("hubspot_owner_id"),
            portal_id=origin.get("portalId"),
        )
