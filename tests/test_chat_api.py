"""HTTP tests for the chat and session endpoints."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Annotated
from unittest.mock import AsyncMock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from ragdesk.app import create_app
from ragdesk.configs.config import AppConfig, get_app_config
from ragdesk.configs.system import APIConfig, TracingConfig
from ragdesk.core.chat import Interaction, get_interaction_sink
from ragdesk.core.llm import get_llm
from ragdesk.core.pipeline.models import DocumentChunk
from ragdesk.core.retrieval import build_vector_store
from ragdesk.infra.lifespan import get_app

from .conftest import FakeVectorStore, make_docs, mock_llm

WHEAT_QUESTION = "What is your company's wheat protein content?"
GOOD_ANSWER = (
    "Our wheat has a protein content of twelve to fourteen percent depending "
    "on the harvest year and the region where the grain was grown and stored."
)
WHEAT_CHUNKS = [
    DocumentChunk(
        text=f"Our wheat protein content is {13 + i} percent.",
        source=f"wheat-{i}.pdf",
        category="Commodities",
    )
    for i in range(3)
]


class RecordingSink:
    def __init__(self) -> None:
        self.records: list[Interaction] = []

    async def record(self, interaction: Interaction) -> None:
        self.records.append(interaction)


class FailingSink:
    async def record(self, interaction: Interaction) -> None:
        raise RuntimeError("analytics backend down")


# =========================================================================
# Fixtures
# =========================================================================


@pytest.fixture(scope="session")
def base_config() -> AppConfig:
    config = AppConfig()
    return config.model_copy(update={"tracing": TracingConfig(enabled=False)})


@pytest.fixture(scope="session")
def app(base_config) -> FastAPI:
    # One application per session: HTTP metrics live in the global registry.
    return create_app(base_config)


class Harness:
    """Swaps the app's external collaborators for in-process doubles."""

    def __init__(self, app: FastAPI, config: AppConfig) -> None:
        self.app = app
        self.config = config
        self.store = FakeVectorStore(make_docs(*WHEAT_CHUNKS))
        self.llm: AsyncMock = mock_llm(GOOD_ANSWER, GOOD_ANSWER, GOOD_ANSWER)
        self.sink = RecordingSink()

        async def fake_vector_store(
            app: Annotated[FastAPI, Depends(get_app)],
        ):
            app.state.vector_store = self.store
            yield

        app.dependency_overrides[build_vector_store] = fake_vector_store
        app.dependency_overrides[get_llm] = lambda: self.llm
        app.dependency_overrides[get_interaction_sink] = lambda: self.sink
        app.dependency_overrides[get_app_config] = lambda: self.config

    def use_config(self, config: AppConfig) -> None:
        self.config = config

    @property
    def sessions(self):
        return self.app.state.session_store


@pytest.fixture
def harness(app, base_config):
    h = Harness(app, base_config)
    yield h
    app.dependency_overrides.clear()


@pytest.fixture
def client(app, harness):
    with TestClient(app) as c:
        yield c


# =========================================================================
# POST /api/v1/chat
# =========================================================================


class TestChat:
    def test_successful_turn(self, client, harness):
        resp = client.post("/api/v1/chat", json={"prompt": f"  {WHEAT_QUESTION}  "})

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "Success"
        assert body["session_id"].startswith("sess_")
        assert body["message"] == GOOD_ANSWER
        assert body["category"] == "Commodities"
        assert body["needs_human_assistance"] is False
        assert body["context_relevance"] == pytest.approx(0.5)
        assert body["sources"] == ["wheat-0.pdf", "wheat-1.pdf", "wheat-2.pdf"]

    def test_turn_persists_human_then_assistant(self, client, harness):
        body = client.post("/api/v1/chat", json={"prompt": WHEAT_QUESTION}).json()

        history = harness.sessions.get_full_history(body["session_id"])

        assert [(m.role, m.content) for m in history] == [
            ("human", WHEAT_QUESTION),
            ("assistant", GOOD_ANSWER),
        ]

    def test_session_is_reused(self, client, harness):
        first = client.post("/api/v1/chat", json={"prompt": WHEAT_QUESTION}).json()
        second = client.post(
            "/api/v1/chat",
            json={
                "prompt": "Is the wheat protein content the same every year?",
                "session_id": first["session_id"],
            },
        ).json()

        assert second["session_id"] == first["session_id"]
        assert len(harness.sessions.get_full_history(first["session_id"])) == 4
        prompt = harness.llm.ainvoke.await_args.args[0]
        assert f"human: {WHEAT_QUESTION}" in prompt.to_string()

    def test_window_size_is_applied(self, client, harness):
        body = client.post(
            "/api/v1/chat", json={"prompt": WHEAT_QUESTION, "window_size": 0}
        ).json()

        assert harness.sessions.get_window_size(body["session_id"]) == 0

    def test_interaction_is_recorded(self, client, harness):
        profile = {"fullname": "Ada Lovelace", "email": "ada@example.com"}
        body = client.post(
            "/api/v1/chat", json={"prompt": WHEAT_QUESTION, "user_info": profile}
        ).json()

        (record,) = harness.sink.records
        assert record.session_id == body["session_id"]
        assert record.question == WHEAT_QUESTION
        assert record.answer == GOOD_ANSWER
        assert record.category == "Commodities"
        assert record.sources == body["sources"]
        assert record.response_time_ms >= 0
        assert record.user_profile.email == "ada@example.com"

    def test_sink_failure_does_not_affect_response(self, app, client, harness):
        app.dependency_overrides[get_interaction_sink] = FailingSink

        resp = client.post("/api/v1/chat", json={"prompt": WHEAT_QUESTION})

        assert resp.status_code == 200
        assert resp.json()["message"] == GOOD_ANSWER

    @pytest.mark.parametrize(
        "payload",
        [
            {"prompt": "   "},
            {"prompt": ""},
            {"prompt": "x" * 1001},
            {"prompt": WHEAT_QUESTION, "window_size": 21},
            {"prompt": WHEAT_QUESTION, "window_size": -1},
            {},
        ],
    )
    def test_invalid_input(self, client, harness, payload):
        resp = client.post("/api/v1/chat", json=payload)

        assert resp.status_code == 400
        body = resp.json()
        assert body["status"] == "Error"
        assert body["code"] == "input_validation"
        assert body["message"]
        harness.llm.ainvoke.assert_not_awaited()

    def test_timeout_returns_504_and_persists_nothing(self, client, harness):
        harness.use_config(
            harness.config.model_copy(
                update={"api": APIConfig(request_timeout=timedelta(milliseconds=50))}
            )
        )

        async def slow(*args, **kwargs):
            await asyncio.sleep(5)
            return AIMessage(content=GOOD_ANSWER)

        harness.llm.ainvoke.side_effect = slow

        resp = client.post(
            "/api/v1/chat", json={"prompt": WHEAT_QUESTION, "session_id": "sess_slow"}
        )

        assert resp.status_code == 504
        assert resp.json()["code"] == "timeout"
        assert harness.sessions.get_full_history("sess_slow") == []

    def test_model_failure_returns_502(self, client, harness):
        harness.llm.ainvoke.side_effect = ConnectionError("provider down")

        resp = client.post("/api/v1/chat", json={"prompt": WHEAT_QUESTION})

        assert resp.status_code == 502
        body = resp.json()
        assert body == {
            "status": "Error",
            "code": "model_error",
            "message": body["message"],
        }
        assert "provider down" not in body["message"]

    def test_vector_store_failure_still_answers(self, client, harness):
        harness.store.error = ConnectionError("index unavailable")
        harness.llm.ainvoke.side_effect = [AIMessage(content="Could you clarify?")]

        resp = client.post("/api/v1/chat", json={"prompt": "hello there"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["sources"] == []
        assert body["context_relevance"] == 0.0
        assert body["needs_human_assistance"] is False


# =========================================================================
# /api/v1/sessions/{id}/window
# =========================================================================


class TestWindowSize:
    def test_default_window(self, client, harness):
        resp = client.get("/api/v1/sessions/sess_x/window")

        assert resp.status_code == 200
        assert resp.json() == {
            "status": "Success",
            "session_id": "sess_x",
            "window_size": harness.config.session.default_window_size,
        }

    def test_set_then_get(self, client, harness):
        put = client.put("/api/v1/sessions/sess_x/window", json={"window_size": 3})
        get = client.get("/api/v1/sessions/sess_x/window")

        assert put.status_code == 200
        assert get.json()["window_size"] == 3

    @pytest.mark.parametrize("window_size", [-1, 21])
    def test_out_of_range(self, client, harness, window_size):
        resp = client.put(
            "/api/v1/sessions/sess_x/window", json={"window_size": window_size}
        )

        assert resp.status_code == 400
        assert resp.json()["code"] == "input_validation"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
