"""Command-line entry point: run one orchestration for a post.

    python -m persona_rooms "Just got back from Lisbon!" --topic travel
    python -m persona_rooms "Anyone into synths?" --topic music --dry-run

Logging is configured from Settings (``PERSONA_ROOMS_*`` environment
variables) before anything else runs. With ``--dry-run`` no generation
service is contacted and every turn uses the fallback lines.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from collections.abc import Sequence

from persona_rooms.core.config import Settings, get_settings
from persona_rooms.core.logging import configure_logging, get_logger
from persona_rooms.generation.client import ChatGenerationClient
from persona_rooms.generation.protocols import TextGenerationProtocol
from persona_rooms.orchestration.loop import ConversationOrchestrator
from persona_rooms.orchestration.models import OrchestrationResult
from persona_rooms.personas.directory import InMemoryPersonaDirectory
from persona_rooms.rooms.store import RoomStore


logger = get_logger(__name__)


def build_orchestrator(
    settings: Settings | None = None,
    generator: TextGenerationProtocol | None = None,
) -> ConversationOrchestrator:
    """Wire a store, persona catalogue and orchestrator from settings.

    The catalogue is read from ``settings.personas_file`` when set, the
    built-in one otherwise.
    """
    settings = settings or get_settings()
    if settings.personas_file:
        directory = InMemoryPersonaDirectory.from_yaml(settings.personas_file)
    else:
        directory = InMemoryPersonaDirectory()
    store = RoomStore(settings)
    return ConversationOrchestrator(store, directory, generator, settings=settings)


async def run_once(
    text: str,
    topics: Sequence[str],
    *,
    settings: Settings | None = None,
    generator: TextGenerationProtocol | None = None,
    scope_id: str = "cli",
) -> OrchestrationResult:
    """Run a single orchestration and shut the orchestrator down."""
    orchestrator = build_orchestrator(settings, generator)
    try:
        return await orchestrator.run(scope_id, text, topics)
    finally:
        await orchestrator.shutdown()


async def _run(args: argparse.Namespace, settings: Settings) -> OrchestrationResult:
    client = None if args.dry_run else ChatGenerationClient.from_settings(settings)
    try:
        return await run_once(
            args.text,
            args.topic,
            settings=settings,
            generator=client,
            scope_id=args.scope,
        )
    finally:
        if client is not None:
            await client.close()


def main(argv: Sequence[str] | None = None, settings: Settings | None = None) -> int:
    """Main entry point for module execution."""
    parser = argparse.ArgumentParser(
        description="Run one multi-persona conversation for a post",
        prog="python -m persona_rooms",
    )
    parser.add_argument("text", help="Post text that triggers the conversation")
    parser.add_argument(
        "--topic",
        action="append",
        default=[],
        help="Topic label of the post (repeatable)",
    )
    parser.add_argument("--scope", default="cli", help="Scope id the room is bound to")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Skip the generation service and use fallback lines",
    )
    args = parser.parse_args(argv)

    settings = settings or get_settings()
    configure_logging(settings)
    logger.info("cli_run_started", scope_id=args.scope, topics=args.topic, dry_run=args.dry_run)

    result = asyncio.run(_run(args, settings))
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
