"""Tests for resolving lifespan dependencies."""

from typing import Annotated, Callable

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from ragdesk.infra.lifespan import get_app, inject


def _app_with_resources(events: list[str]) -> tuple[FastAPI, Callable]:
    async def build_first(app: Annotated[FastAPI, Depends(get_app)]):
        events.append("first:start")
        app.state.first = "ready"
        yield
        events.append("first:stop")

    async def build_second(
        app: Annotated[FastAPI, Depends(get_app)],
        _first: Annotated[None, Depends(build_first)],
    ):
        events.append("second:start")
        app.state.second = app.state.first + "+second"
        yield
        events.append("second:stop")

    @inject
    async def lifespan(
        app: FastAPI,
        _second: Annotated[None, Depends(build_second)],
    ):
        events.append("serving")
        yield

    app = FastAPI(lifespan=lifespan)

    @app.get("/state")
    async def state(request_app: Annotated[FastAPI, Depends(get_app)]):
        return {"second": request_app.state.second}

    return app, build_first


class TestInject:
    def test_generator_dependencies_start_and_stop_in_order(self):
        events: list[str] = []
        app, _ = _app_with_resources(events)

        with TestClient(app) as client:
            assert client.get("/state").json() == {"second": "ready+second"}
            assert events == ["first:start", "second:start", "serving"]

        assert events[-2:] == ["second:stop", "first:stop"]

    def test_overrides_apply_to_lifespan_dependencies(self):
        events: list[str] = []
        app, build_first = _app_with_resources(events)

        async def fake_first(app: Annotated[FastAPI, Depends(get_app)]):
            events.append("fake:start")
            app.state.first = "fake"
            yield
            events.append("fake:stop")

        app.dependency_overrides[build_first] = fake_first

        with TestClient(app) as client:
            assert client.get("/state").json() == {"second": "fake+second"}

        assert events[0] == "fake:start"
        assert "first:start" not in events
        assert events[-1] == "fake:stop"
