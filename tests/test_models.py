"""Tests for data models."""

import pytest
from pydantic import ValidationError

from ticket_router.models import (
    Candidate,
    ScoredCandidate,
    Ticket,
    TicketEvent,
)


class TestTicketEvent:
    """Tests for TicketEvent model."""

    @pytest.fixture
    def workflow_event(self):
        """Sample workflow action payload."""
        return {
            "origin": {"portalId": 4242},
            "inputFields": {
                "hs_ticket_id": 1001,
                "subject": "Cannot log in",
                "content": "Password reset link is broken",
                "hubspot_owner_id": "",
            },
        }

    def test_from_workflow_event(self, workflow_event):
        """Test parsing the workflow payload."""
        ticket = TicketEvent.from_workflow_event(workflow_event)
        assert ticket.ticket_id == "1001"
        assert ticket.subject == "Cannot log in"
        assert ticket.content == "Password reset link is broken"
        assert ticket.portal_id == "4242"

    def test_empty_owner_is_unassigned(self, workflow_event):
        """Test an empty owner field means no owner."""
        ticket = TicketEvent.from_workflow_event(workflow_event)
        assert ticket.owner_id is None
        assert ticket.has_owner() is False

    def test_existing_owner(self, workflow_event):
        """Test a numeric owner id is kept as a string."""
        workflow_event["inputFields"]["hubspot_owner_id"] = 77
        ticket = TicketEvent.from_workflow_event(workflow_event)
        assert ticket.owner_id == "77"
        assert ticket.has_owner() is True

    def test_missing_ticket_id_rejected(self):
        """Test a ticket id is required."""
        with pytest.raises(ValidationError):
            TicketEvent.from_workflow_event({"inputFields": {"subject": "x"}})

    def test_missing_sections(self):
        """Test missing origin and text fields fall back to defaults."""
        ticket = TicketEvent.from_workflow_event({"inputFields": {"hs_ticket_id": "5"}})
        assert ticket.subject == ""
        assert ticket.content == ""
        assert ticket.portal_id is None

    @pytest.mark.parametrize("event", [[1, 2], "ticket", 42, None])
    def test_non_object_event_rejected(self, event):
        """Test a payload that is not a JSON object raises ValueError, not AttributeError."""
        with pytest.raises(ValueError, match="must be a JSON object"):
            TicketEvent.from_workflow_event(event)

    @pytest.mark.parametrize("section", ["inputFields", "origin"])
    def test_non_object_section_rejected(self, workflow_event, section):
        workflow_event[section] = ["not", "a", "mapping"]
        with pytest.raises(ValueError, match=section):
            TicketEvent.from_workflow_event(workflow_event)


class TestCandidate:
    """Tests for Candidate model."""

    def test_requires_owner(self):
        """Test a candidate must have an owner."""
        with pytest.raises(ValidationError):
            Candidate(ticket_id="1", owner_id="", embedding=[1.0])

    def test_frozen(self):
        """Test candidates are immutable."""
        candidate = Candidate(ticket_id="1", owner_id="u1", embedding=[1.0, 0.0])
        with pytest.raises(ValidationError):
            candidate.owner_id = "u2"


class TestScoredCandidate:
    """Tests for ScoredCandidate model."""

    def test_score_bounds(self):
        """Test score must lie in [-1, 1]."""
        with pytest.raises(ValidationError):
            ScoredCandidate(ticket_id="1", owner_id="u1", score=1.5)


class TestTicket:
    """Tests for Ticket model."""

    def test_optional_fields(self):
        """Test owner and embedding are optional."""
        ticket = Ticket(ticket_id="1", subject="s", content="c")
        assert ticket.owner_id is None
        assert ticket.embedding is None

    def test_to_candidate(self):
        """Test an owned ticket with an embedding becomes a candidate."""
        ticket = Ticket(ticket_id="1", subject="VPN down", owner_id="u1", embedding=[0.1, 0.2])
        candidate = ticket.to_candidate()
        assert candidate.ticket_id == "1"
        assert candidate.owner_id == "u1"
        assert candidate.display_name == "VPN down"
        assert candidate.embedding == [0.1, 0.2]

    def test_to_candidate_requires_owner_and_embedding(self):
        with pytest.raises(ValueError, match="no owner"):
            Ticket(ticket_id="1", embedding=[0.1]).to_candidate()
        with pytest.raises(ValueError, match="no embedding"):
            Ticket(ticket_id="1", owner_id="u1").to_candidate()
