"""API-layer dependencies: request-scoped wiring (UoW, outbound clients)."""

from newsdesk.api.dependencies.clients import (
    get_dify_client,
    get_llm_client_factory,
    get_settings,
    get_storage_backends,
)
from newsdesk.api.dependencies.unit_of_work import UnitOfWork, get_connection_manager, get_uow

__all__ = [
    "UnitOfWork",
    "get_connection_manager",
    "get_dify_client",
    "get_llm_client_factory",
    "get_settings",
    "get_storage_backends",
    "get_uow",
]
