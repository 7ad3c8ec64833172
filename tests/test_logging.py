"""Tests for per-turn log fields."""

from __future__ import annotations

import io
import json
import logging
from datetime import timedelta

import pytest

from ragdesk.configs.system import LoggingConfig
from ragdesk.core.chat.service import ChatService
from ragdesk.core.pipeline.orchestrator import Orchestrator
from ragdesk.infra.logging import (
    TurnContextFilter,
    current_log_context,
    log_context,
    setup_logging,
)
from ragdesk.infra.sessions import InMemorySessionStore

from .conftest import FakeVectorStore, mock_llm


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestLogContext:
    def test_nested_blocks_merge_and_reset(self):
        assert current_log_context() == {}
        with log_context(session_id="sess_a"):
            with log_context(stage="retrieve"):
                assert current_log_context() == {
                    "session_id": "sess_a",
                    "stage": "retrieve",
                }
            assert current_log_context() == {"session_id": "sess_a"}
        assert current_log_context() == {}

    def test_filter_fills_missing_fields_with_blanks(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)
        assert TurnContextFilter().filter(record)
        assert record.session_id == ""
        assert record.stage == ""
        assert record.trace_id == ""

    def test_json_lines_carry_turn_fields(self, restore_root_logger):
        stream = io.StringIO()
        handler = setup_logging(LoggingConfig(json_output=True))
        handler.setStream(stream)

        with log_context(session_id="sess_abc", stage="generate"):
            logging.getLogger("ragdesk.test").warning("slow model")

        line = json.loads(stream.getvalue().splitlines()[-1])
        assert line["message"] == "slow model"
        assert line["level"] == "WARNING"
        assert line["logger"] == "ragdesk.test"
        assert line["session_id"] == "sess_abc"
        assert line["stage"] == "generate"


class TestTurnLogging:
    @pytest.mark.asyncio
    async def test_pipeline_records_name_session_and_stage(self, caplog, prompts):
        caplog.handler.addFilter(TurnContextFilter())
        caplog.set_level(logging.WARNING, logger="ragdesk.core.pipeline.retriever")
        orchestrator = Orchestrator.build(
            llm=mock_llm("Could you share more detail about the barley?"),
            vector_store=FakeVectorStore(error=ConnectionError("index down")),
            prompts=prompts,
        )
        service = ChatService(
            orchestrator,
            InMemorySessionStore(),
            request_timeout=timedelta(seconds=5),
        )

        turn = await service.chat("barley moisture", session_id="sess_log")

        failures = [
            r for r in caplog.records if r.name == "ragdesk.core.pipeline.retriever"
        ]
        assert failures
        assert failures[0].session_id == turn.session_id == "sess_log"
        assert failures[0].stage == "retrieve"
        assert current_log_context() == {}
