"""Centralized FastAPI dependency type aliases.

Import these ``*Dep`` aliases in route modules instead of manually
writing ``Annotated[T, Depends(get_xxx)]`` everywhere.  Each alias
corresponds to a single ``get_*`` factory and can be overridden in
tests via ``app.dependency_overrides[get_xxx] = ...``.
"""

from typing import Annotated

from fastapi import Depends

from ragdesk.configs.config import (
    AppConfig,
    get_api_config,
    get_app_config,
    get_session_config,
)
from ragdesk.configs.system import APIConfig, SessionConfig
from ragdesk.core.chat import ChatService, get_chat_service
from ragdesk.infra.sessions import SessionStore, get_session_store

AppConfigDep = Annotated[AppConfig, Depends(get_app_config)]
APIConfigDep = Annotated[APIConfig, Depends(get_api_config)]
SessionConfigDep = Annotated[SessionConfig, Depends(get_session_config)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
