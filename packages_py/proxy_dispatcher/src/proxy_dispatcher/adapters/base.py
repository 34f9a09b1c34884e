"""
Abstract base adapter for HTTP libraries.
"""
from abc import ABC, abstractmethod
from typing import Any
from ..models import FetchFunction, TransportSettings


class BaseAdapter(ABC):
    """Abstract interface for HTTP library adapters."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the adapter (e.g., 'httpx')."""
        pass

    @abstractmethod
    def create_client(self, settings: TransportSettings) -> Any:
        """Create a client configured from ``settings``.

        Raises whatever the underlying library raises; the factory turns
        that into a fallback.
        """
        pass

    @abstractmethod
    def create_host_client(self, settings: TransportSettings) -> Any:
        """Create the library's default client, left to read the environment itself."""
        pass

    @abstractmethod
    def bind_fetch(self, client: Any) -> FetchFunction:
        """Return a fetch-style callable that issues requests through ``client``."""
        pass
