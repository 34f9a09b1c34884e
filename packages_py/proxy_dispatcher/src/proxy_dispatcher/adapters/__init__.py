"""
Client adapters, looked up by name when a TransportFactory is created.

Only ``httpx`` ships built in. Custom adapters subclass ``BaseAdapter`` and
are added with ``register_adapter``, which also works as a class decorator.
"""
import logging
from typing import Dict, List, Optional, Type

from .base import BaseAdapter
from .adapter_httpx import HttpxAdapter

logger = logging.getLogger(__name__)

_registry: Dict[str, Type[BaseAdapter]] = {}


def register_adapter(adapter_cls: Type[BaseAdapter], name: Optional[str] = None) -> Type[BaseAdapter]:
    """Make ``adapter_cls`` available under ``name`` (default: its ``name`` property).

    A later registration under the same name replaces the earlier one.
    """
    key = name or adapter_cls().name
    if key in _registry and _registry[key] is not adapter_cls:
        logger.debug(f"Replacing adapter '{key}': {_registry[key].__name__} -> {adapter_cls.__name__}")
    _registry[key] = adapter_cls
    return adapter_cls


def available_adapters() -> List[str]:
    return sorted(_registry)


def get_adapter(name: str) -> BaseAdapter:
    """Instantiate the adapter registered as ``name``; ``KeyError`` if none is."""
    try:
        adapter_cls = _registry[name]
    except KeyError:
        raise KeyError(f"No transport adapter named '{name}' (known: {', '.join(available_adapters())})") from None
    return adapter_cls()


register_adapter(HttpxAdapter)

__all__ = ["BaseAdapter", "HttpxAdapter", "available_adapters", "get_adapter", "register_adapter"]
