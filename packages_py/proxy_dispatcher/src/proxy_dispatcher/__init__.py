"""
Proxy dispatcher package.
"""
from .models import ConfiguredDispatcher, RequestOptions, TransportSettings
from .errors import DispatcherError, DispatcherConstructionError
from .factory import TransportFactory, create_transport_factory
from .context import NetworkContext
from .override import OverrideScope
from .settings import FetchTransport
from .dispatcher import (
    aclose,
    fetch,
    get_client_settings,
    get_default_context,
    get_dispatcher,
    with_override,
)
from .adapters import register_adapter, BaseAdapter

__all__ = [
    "ConfiguredDispatcher",
    "RequestOptions",
    "TransportSettings",
    "DispatcherError",
    "DispatcherConstructionError",
    "TransportFactory",
    "create_transport_factory",
    "NetworkContext",
    "OverrideScope",
    "FetchTransport",
    "aclose",
    "fetch",
    "get_client_settings",
    "get_default_context",
    "get_dispatcher",
    "with_override",
    "register_adapter",
    "BaseAdapter",
]
