"""
Configuration module for the Similar-Ticket Owner Router.

Handles all configuration through environment variables with secure defaults.
Never stores sensitive data directly in code.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()


DEFAULT_LINK_TEMPLATE = "https://app.hubspot.com/contacts/{portal_id}/ticket/{ticket_id}"

TIE_BREAK_POLICIES = ("input", "ticket_id")


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


def _csv_tuple(name: str) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class HubSpotConfig:
    """Configuration for the HubSpot CRM ticket store."""

    access_token: str = field(
        default_factory=lambda: os.getenv("HUBSPOT_TOKEN", "")
    )
    api_base_url: str = field(
        default_factory=lambda: os.getenv("HUBSPOT_API_BASE", "https://api.hubapi.com")
    )

    # Portal id is used to build links in the similarity report
    portal_id: str = field(
        default_factory=lambda: os.getenv("HUBSPOT_PORTAL_ID", "")
    )

    # Request timeout in seconds
    request_timeout: int = field(
        default_factory=lambda: int(os.getenv("REQUEST_TIMEOUT", "30"))
    )

    # Maximum number of candidate tickets returned by one search
    search_limit: int = field(
        default_factory=lambda: int(os.getenv("HUBSPOT_SEARCH_LIMIT", "100"))
    )


@dataclass(frozen=True)
class EmbeddingConfig:
    """Configuration for the embedding API (OpenAI compatible)."""

    api_key: str = field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", "")
    )
    api_base_url: Optional[str] = field(
        default_factory=lambda: os.getenv("OPENAI_API_BASE", None)
    )
    model: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL", "text-embedding-ada-002")
    )
    max_retries: int = field(
        default_factory=lambda: int(os.getenv("EMBEDDING_MAX_RETRIES", "3"))
    )


@dataclass(frozen=True)
class RoutingConfig:
    """Configuration for ranking, owner selection and the similarity report."""

    # Number of similar tickets listed in the report
    report_size: int = field(
        default_factory=lambda: int(os.getenv("SIMILAR_TICKETS_COUNT", "3"))
    )
    link_template: str = field(
        default_factory=lambda: os.getenv("TICKET_LINK_TEMPLATE", DEFAULT_LINK_TEMPLATE)
    )

    # "input" keeps search order for equal scores, "ticket_id" sorts ties by id
    tie_break: str = field(
        default_factory=lambda: os.getenv("ROUTING_TIE_BREAK", "input").lower()
    )

    # Candidates scoring below this are never used to pick an owner
    min_score: Optional[float] = field(
        default_factory=lambda: _optional_float("ROUTING_MIN_SCORE")
    )

    # Owners that must not receive new tickets (comma separated ids)
    unavailable_owners: tuple[str, ...] = field(
        default_factory=lambda: _csv_tuple("UNAVAILABLE_OWNERS")
    )


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration aggregating all config sections."""

    hubspot: HubSpotConfig = field(default_factory=HubSpotConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)

    # Logging level
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors = []

        if not self.hubspot.access_token:
            errors.append("HUBSPOT_TOKEN is required")
        if self.hubspot.search_limit <= 0:
            errors.append("HUBSPOT_SEARCH_LIMIT must be positive")

        if not self.embedding.api_key:
            errors.append("OPENAI_API_KEY is required for embeddings")

        if self.routing.report_size < 0:
            errors.append("SIMILAR_TICKETS_COUNT must not be negative")
        if self.routing.tie_break not in TIE_BREAK_POLICIES:
            errors.append(
                f"ROUTING_TIE_BREAK must be one of {', '.join(TIE_BREAK_POLICIES)}"
            )
        if "{ticket_id}" not in self.routing.link_template:
            errors.append("TICKET_LINK_TEMPLATE must contain a {ticket_id} placeholder")

        return errors


def get_config() -> AppConfig:
    """
    Get application configuration.

    Returns:
        AppConfig instance with all settings loaded from environment.
    """
    return AppConfig()
