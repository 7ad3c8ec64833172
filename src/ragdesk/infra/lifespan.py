"""Resolve ``Depends()`` parameters for the application lifespan.

Long-lived resources (session store and its evictor, vector store) are
written as ordinary dependency generators. ``inject`` solves them once at
startup against a synthetic request and unwinds them in reverse order on
shutdown.
"""

from contextlib import AsyncExitStack, asynccontextmanager
from functools import partial
from typing import Any, AsyncIterator, Callable

from fastapi import FastAPI, Request
from fastapi.dependencies.utils import get_dependant, solve_dependencies

LIFESPAN_PATH = "/__lifespan__"

# Scope keys FastAPI looks up when it enters generator dependencies.
_EXIT_STACK_KEYS = (
    "fastapi_astack",
    "fastapi_inner_astack",
    "fastapi_function_astack",
)


def _lifespan_request(app: FastAPI, stack: AsyncExitStack) -> Request:
    scope: dict[str, Any] = {
        "type": "http",
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": LIFESPAN_PATH,
        "raw_path": LIFESPAN_PATH.encode(),
        "query_string": b"",
        "root_path": "",
        "headers": [],
        "client": None,
        "server": None,
        "app": app,
        "state": app.state,
    }
    scope.update({key: stack for key in _EXIT_STACK_KEYS})
    return Request(scope=scope)


def get_app(request: Request) -> FastAPI:
    return request.app


def inject(
    lifespan: Callable[..., AsyncIterator[None]],
) -> Callable[[FastAPI], Any]:
    """Turn a ``Depends()``-annotated async generator into a lifespan.

    Usage::

        @inject
        async def lifespan(
            app: FastAPI,
            _sessions: Annotated[None, Depends(build_session_store)],
        ):
            yield

    ``app.dependency_overrides`` is honoured, so tests can swap any
    resource before the client starts.
    """

    @asynccontextmanager
    async def wrapper(app: FastAPI) -> AsyncIterator[None]:
        dependant = get_dependant(path=LIFESPAN_PATH, call=partial(lifespan, app))

        async with AsyncExitStack() as stack:
            solved = await solve_dependencies(
                request=_lifespan_request(app, stack),
                dependant=dependant,
                async_exit_stack=stack,
                embed_body_fields=False,
                dependency_overrides_provider=app,
            )
            if solved.errors:
                raise RuntimeError(f"Lifespan dependencies failed: {solved.errors}")
            async with asynccontextmanager(lifespan)(app, **solved.values):
                yield

    return wrapper
