"""
NetworkContext: owner of the process transport and the test override slot.
"""
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import httpx
from proxy_config import EnvSnapshot, TransportStrategy, decide, read_environment

from .config import DEFAULT_TIMEOUT
from .factory import TransportFactory
from .models import ConfiguredDispatcher, FetchFunction, FetchTarget, RequestOptions, TransportSettings
from .override import OverrideScope, with_override
from .settings import client_settings_for

logger = logging.getLogger(__name__)


class NetworkContext:
    """Chooses the transport once and serves every request through it.

    The environment is read and the dispatcher built on first access, then
    memoized for the lifetime of the context. Proxy changes in the
    environment need a new context (in production: a restart).

    Args:
        environ: Mapping to read proxy variables from. Defaults to
            ``os.environ`` at first access.
        factory: Transport factory. Defaults to the httpx adapter.
        host_fetch: Fetch provided by an embedding host. Used for the
            native host strategy; defaults to a plain httpx client.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        factory: Optional[TransportFactory] = None,
        host_fetch: Optional[FetchFunction] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._environ = environ
        self._factory = factory or TransportFactory(timeout=timeout)
        self._host_fetch = host_fetch

        self._dispatcher: Optional[ConfiguredDispatcher] = None
        self._base_fetch: Optional[FetchFunction] = None
        self._host_client: Any = None
        self._host_client_fetch: Optional[FetchFunction] = None
        self._override: Optional[FetchFunction] = None

    # =========================================================================
    # Environment and dispatcher
    # =========================================================================

    def snapshot(self) -> EnvSnapshot:
        """Read a fresh snapshot of the proxy environment."""
        return read_environment(self._environ)

    def get_dispatcher(self) -> ConfiguredDispatcher:
        """The memoized dispatcher, built on first call."""
        if self._dispatcher is None:
            self._build()
        return self._dispatcher

    def _build(self) -> None:
        try:
            snapshot = self.snapshot()
            dispatcher = self._factory.build(decide(snapshot), snapshot)
        except Exception as e:
            logger.warning(f"[net] Failed to configure transport, using host transport: {e}")
            dispatcher = ConfiguredDispatcher(
                strategy=TransportStrategy.NATIVE_HOST,
                settings=TransportSettings(),
                fallback_reason=str(e),
            )

        if dispatcher.client is not None:
            base_fetch = self._factory.adapter.bind_fetch(dispatcher.client)
        else:
            base_fetch = self._host_fetch or self._default_host_fetch

        # Concurrent first accesses may both get here; last writer wins.
        self._dispatcher = dispatcher
        self._base_fetch = base_fetch

    def _get_base_fetch(self) -> FetchFunction:
        if self._base_fetch is None:
            self._build()
        return self._base_fetch

    def _default_host_fetch(
        self,
        target: FetchTarget,
        options: Optional[RequestOptions] = None
    ) -> Awaitable[httpx.Response]:
        if self._host_client_fetch is None:
            settings = (self._dispatcher.settings if self._dispatcher else None) or TransportSettings()
            self._host_client = self._create_host_client(settings)
            self._host_client_fetch = self._factory.adapter.bind_fetch(self._host_client)
        return self._host_client_fetch(target, options)

    def _create_host_client(self, settings: TransportSettings) -> Any:
        adapter = self._factory.adapter
        try:
            return adapter.create_host_client(settings)
        except Exception as e:
            logger.warning(f"[net] Failed to create host transport, using non-proxied client: {e}")
            return adapter.create_host_client(replace(settings, trust_env=False, ca_bundle=None))

    # =========================================================================
    # Public surface
    # =========================================================================

    def fetch(
        self,
        target: FetchTarget,
        options: Optional[RequestOptions] = None
    ) -> Awaitable[httpx.Response]:
        """Issue a request through the override if one is installed, else the base transport."""
        override = self._override
        if override is not None:
            return override(target, options)
        return self._get_base_fetch()(target, options)

    def get_client_settings(self) -> Dict[str, Any]:
        """Settings to spread into a secondary ``httpx.AsyncClient``."""
        return client_settings_for(self)

    def override(self, replacement: FetchFunction) -> OverrideScope:
        """Guard object installing ``replacement``; use with ``with`` or ``async with``."""
        return OverrideScope(self, replacement)

    def with_override(self, replacement: FetchFunction, callback: Callable[[], Any]) -> Any:
        """Install ``replacement`` for the duration of ``callback()``."""
        return with_override(self, replacement, callback)

    def _swap_override(self, replacement: Optional[FetchFunction]) -> Optional[FetchFunction]:
        previous = self._override
        self._override = replacement
        return previous

    async def aclose(self) -> None:
        """Close owned clients and forget the memoized transport."""
        dispatcher, host_client = self._dispatcher, self._host_client
        self.reset()
        if dispatcher is not None:
            await dispatcher.aclose()
        if host_client is not None:
            await host_client.aclose()

    def reset(self) -> None:
        """Forget the memoized transport so the next access rebuilds it.

        Does not close clients; see ``aclose``.
        """
        self._dispatcher = None
        self._base_fetch = None
        self._host_client = None
        self._host_client_fetch = None
