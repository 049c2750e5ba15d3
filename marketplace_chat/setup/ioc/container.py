"""
Dishka DI Container Setup.

Two providers:
- InfrastructureProvider (infrastructure_provider.py): production adapters
- AppProvider (app_provider.py): application services and handlers

Tests build their own container from a fake-backed provider plus AppProvider.
"""

from dishka import AsyncContainer, Provider, make_async_container

from marketplace_chat.setup.ioc.app_provider import AppProvider
from marketplace_chat.setup.ioc.infrastructure_provider import InfrastructureProvider


def create_container(*providers: Provider) -> AsyncContainer:
    """
    Create and configure the DI container.

    - Without arguments: production adapters + application handlers
    - Call this ONCE per app instance
    """
    if not providers:
        providers = (InfrastructureProvider(), AppProvider())
    return make_async_container(*providers)
