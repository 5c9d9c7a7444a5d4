"""
Main entry point for the Similar-Ticket Owner Router.

Orchestrates one routing decision:
1. Fetch the embedding of the new ticket
2. Search previously-owned tickets with embeddings
3. Rank them, pick an owner and render the similarity report
4. Write the resulting patch back to the ticket
"""

import json
import logging
import sys
from typing import Optional

import click

from . import __version__
from .config import get_config, AppConfig
from .embeddings import OpenAIEmbeddingProvider, EmbeddingFetchError
from .hubspot import HubSpotTicketStore, TicketStoreError
from .models import TicketEvent, UpdatePatch
from .router import TicketRouter
from .similarity import VectorMathError


def setup_logging(level: str) -> None:
    """
    Configure application logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Error during a routing decision."""
    pass


def validate_config(config: AppConfig) -> None:
    """
    Validate configuration before running.

    Args:
        config: Application configuration.

    Raises:
        PipelineError: If configuration is invalid.
    """
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        raise PipelineError(
            f"Configuration validation failed with {len(errors)} error(s)"
        )


def process_ticket_event(
    ticket: TicketEvent,
    embedder: OpenAIEmbeddingProvider,
    store: HubSpotTicketStore,
    router: TicketRouter,
    dry_run: bool = False,
) -> UpdatePatch:
    """
    Route one ticket and persist the result.

    Nothing is written unless the embedding, search and ranking all
    succeed. A failed write is reported, not retried.

    Args:
        ticket: The ticket being routed.
        embedder: Embedding provider.
        store: Open ticket store (inside its context manager).
        router: Router deciding owner and report.
        dry_run: If True, compute the patch without writing it.

    Returns:
        The patch that was (or, on a dry run, would have been) applied.

    Raises:
        PipelineError: If any step fails.
    """
    logger.info(f"Routing ticket {ticket.ticket_id}")

    try:
        embedding = embedder.embed_ticket(ticket.subject, ticket.content)
    except EmbeddingFetchError as e:
        raise PipelineError(f"Embedding fetch failed: {e}") from e

    try:
        candidates = store.find_candidates(exclude_ticket_id=ticket.ticket_id)
    except TicketStoreError as e:
        raise PipelineError(f"Candidate search failed: {e}") from e

    try:
        patch = router.route(ticket, embedding, candidates)
    except VectorMathError as e:
        raise PipelineError(f"Ranking failed: {e}") from e

    if dry_run:
        logger.info(f"Dry run: not updating ticket {ticket.ticket_id}")
        return patch

    try:
        store.apply_patch(ticket.ticket_id, patch)
    except TicketStoreError as e:
        raise PipelineError(f"Ticket update failed: {e}") from e

    logger.info(f"Ticket {ticket.ticket_id} updated ({len(patch)} properties)")
    return patch


def run_pipeline(
    event: dict,
    config: Optional[AppConfig] = None,
    dry_run: bool = False,
) -> UpdatePatch:
    """
    Execute a routing decision for a workflow event.

    Args:
        event: Raw workflow event payload.
        config: Optional configuration override.
        dry_run: If True, do not write the patch back.

    Returns:
        The computed patch.

    Raises:
        PipelineError: If the event or configuration is invalid, or any
            step fails.
    """
    if config is None:
        config = get_config()

    validate_config(config)

    try:
        ticket = TicketEvent.from_workflow_event(event)
    except ValueError as e:
        raise PipelineError(f"Invalid ticket event: {e}") from e

    if not ticket.portal_id and config.hubspot.portal_id:
        ticket = ticket.model_copy(update={"portal_id": config.hubspot.portal_id})

    embedder = OpenAIEmbeddingProvider(config.embedding)
    router = TicketRouter(config.routing)

    with HubSpotTicketStore(config.hubspot) as store:
        return process_ticket_event(ticket, embedder, store, router, dry_run=dry_run)


@click.command()
@click.option(
    "--event",
    "-e",
    "event_file",
    type=click.File("r"),
    default="-",
    show_default=True,
    help="Workflow event JSON file ('-' reads stdin)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Compute the update without writing it to the ticket",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug logging",
)
@click.option(
    "--validate-only",
    is_flag=True,
    default=False,
    help="Only validate configuration without routing",
)
@click.version_option(__version__, prog_name="ticket-router")
def main(
    event_file,
    dry_run: bool,
    debug: bool,
    validate_only: bool,
) -> None:
    """
    Similar-Ticket Owner Router.

    Assigns a new ticket to the owner of the most similar existing ticket
    and stores a report of the closest matches on it.
    """
    try:
        config = get_config()

        if debug:
            config = AppConfig(
                hubspot=config.hubspot,
                embedding=config.embedding,
                routing=config.routing,
                log_level="DEBUG",
            )

        setup_logging(config.log_level)

        if validate_only:
            logger.info("Validating configuration...")
            validate_config(config)
            logger.info("Configuration is valid!")
            return

        try:
            event = json.load(event_file)
        except json.JSONDecodeError as e:
            raise PipelineError(f"Event is not valid JSON: {e}") from e

        patch = run_pipeline(event, config, dry_run=dry_run)
        click.echo(json.dumps(patch, indent=2))

    except PipelineError as e:
        click.echo(f"Routing failed: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        if debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
