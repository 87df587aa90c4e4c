"""Centralized FastAPI dependency type aliases.

Import these ``*Dep`` aliases in route modules instead of manually
writing ``Annotated[T, Depends(get_xxx)]`` everywhere.  Each alias
corresponds to a single ``get_*`` factory and can be overridden in
tests via ``app.dependency_overrides[get_xxx] = ...``.
"""

from typing import Annotated

from fastapi import Depends, Request

from pickleai.configs.config import get_api_config
from pickleai.configs.system import APIConfig
from pickleai.core.chat.registry import SessionRegistry


def get_session_registry(request: Request) -> SessionRegistry:
    """The registry created by the application lifespan."""
    return request.app.state.registry


APIConfigDep = Annotated[APIConfig, Depends(get_api_config)]
SessionRegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]
