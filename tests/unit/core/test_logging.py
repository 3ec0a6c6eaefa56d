"""Unit tests for structured logging configuration.

Test Coverage:
- ServiceContext processor and the processor chain per environment
- configure_logging() output stream and room context binding
- Room/scope ids bound for the duration of an orchestration run
"""

import json
from collections.abc import Iterator

import pytest
import structlog

from persona_rooms.core.config import Settings
from persona_rooms.core.logging import (
    ServiceContext,
    build_processors,
    configure_logging,
    get_logger,
    room_log_context,
)
from persona_rooms.orchestration.loop import ConversationOrchestrator
from persona_rooms.personas.directory import InMemoryPersonaDirectory
from persona_rooms.rooms.store import RoomStore
from tests.fakes import FakeTextGenerator


@pytest.fixture
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


class TestServiceContext:
    def test_adds_service_and_environment(self) -> None:
        processor = ServiceContext(Settings(service_name="rooms-test", environment="staging"))

        event = processor(None, "info", {"event": "room_created"})

        assert event == {"event": "room_created", "service": "rooms-test", "environment": "staging"}

    def test_keeps_explicit_values(self) -> None:
        processor = ServiceContext(Settings(service_name="rooms-test"))

        event = processor(None, "info", {"event": "room_created", "service": "other"})

        assert event["service"] == "other"


class TestBuildProcessors:
    def test_json_renderer_in_production(self) -> None:
        processors = build_processors(Settings(environment="production"))

        assert processors[0] is structlog.contextvars.merge_contextvars
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_in_development(self) -> None:
        processors = build_processors(Settings(environment="development"))

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert structlog.processors.format_exc_info not in processors


class TestConfigureLogging:
    def test_installs_processor_chain(self, reset_structlog: None) -> None:
        configure_logging(Settings(environment="production"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_events_go_to_stderr_with_room_context(
        self, reset_structlog: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(Settings(environment="production", service_name="rooms-test"))

        with room_log_context("room-1", "post-1"):
            get_logger("persona_rooms.test").info("turn_taken", speaker="A")

        captured = capsys.readouterr()
        event = json.loads(captured.err.strip().splitlines()[-1])
        assert captured.out == ""
        assert event["event"] == "turn_taken"
        assert event["room_id"] == "room-1"
        assert event["scope_id"] == "post-1"
        assert event["service"] == "rooms-test"

    def test_level_filters_debug(self, reset_structlog: None, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(Settings(environment="production", log_level="INFO"))

        get_logger("persona_rooms.test").debug("noisy_detail")

        assert capsys.readouterr().err == ""

    def test_get_logger_returns_bindable_logger(self) -> None:
        logger = get_logger(__name__)

        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")


class TestRoomLogContext:
    def test_binds_and_restores(self) -> None:
        with structlog.contextvars.bound_contextvars(request_id="r-1"):
            with room_log_context("room-1", "post-1"):
                bound = structlog.contextvars.get_contextvars()
            after = structlog.contextvars.get_contextvars()

        assert bound == {"request_id": "r-1", "room_id": "room-1", "scope_id": "post-1"}
        assert after == {"request_id": "r-1"}

    @pytest.mark.asyncio
    async def test_orchestration_run_binds_room_and_scope(
        self, store: RoomStore, letter_directory: InMemoryPersonaDirectory, test_settings: Settings, rng
    ) -> None:
        seen: list[dict] = []

        async def record_context(seconds: float) -> None:
            seen.append(structlog.contextvars.get_contextvars())

        orchestrator = ConversationOrchestrator(
            store,
            letter_directory,
            FakeTextGenerator(),
            settings=test_settings,
            rng=rng,
            sleep=record_context,
        )

        result = await orchestrator.run("post-9", "hello there", ["tech"], ["A", "B", "C"])

        assert seen
        assert all(ctx == {"room_id": result.room_id, "scope_id": "post-9"} for ctx in seen)
        assert structlog.contextvars.get_contextvars() == {}
