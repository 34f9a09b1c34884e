"""
Factory for building the process transport from a proxy decision.
"""
import logging
from dataclasses import replace
from typing import Optional

from proxy_config import (
    EnvSnapshot,
    ProxyDecision,
    TransportStrategy,
    safe_default_strategy,
)
from .adapters import BaseAdapter, get_adapter
from .config import DEFAULT_TIMEOUT, build_settings
from .errors import DispatcherConstructionError
from .models import ConfiguredDispatcher

logger = logging.getLogger(__name__)


class TransportFactory:
    """Builds a ``ConfiguredDispatcher`` for a decided strategy.

    Never raises: a failed construction degrades to the safe default for
    the deployment mode, and to the host transport if that fails too.
    """

    def __init__(
        self,
        adapter: str = "httpx",
        timeout: float = DEFAULT_TIMEOUT
    ):
        self.adapter: BaseAdapter = get_adapter(adapter)
        self.timeout = timeout
        logger.debug(f"TransportFactory initialized with adapter '{adapter}'")

    def build(self, decision: ProxyDecision, snapshot: EnvSnapshot) -> ConfiguredDispatcher:
        """Construct the dispatcher for ``decision``."""
        try:
            return self._construct(decision, snapshot)
        except Exception as e:
            error = DispatcherConstructionError(decision.strategy, e)
            logger.warning(f"[net] {error}; using default transport")
            return self._fallback(decision, snapshot, reason=str(error))

    def _construct(self, decision: ProxyDecision, snapshot: EnvSnapshot) -> ConfiguredDispatcher:
        settings = build_settings(decision, snapshot, timeout=self.timeout)
        strategy = decision.strategy
        descriptor = decision.descriptor

        if strategy is TransportStrategy.NATIVE_HOST:
            logger.info("[net] Using host transport")
            return ConfiguredDispatcher(strategy=strategy, settings=settings)

        if strategy is TransportStrategy.PROXY_DISPATCHER:
            logger.info(
                f"[net] Configuring {descriptor.protocol.value} proxy: "
                f"{descriptor.protocol.value}://{descriptor.host}:{descriptor.port}"
            )
        elif strategy is TransportStrategy.ENV_PROXY_DISPATCHER:
            logger.info("[net] Configuring HTTP/HTTPS proxy from environment variables")
        else:
            logger.info("[net] Using non-proxied transport")

        client = self.adapter.create_client(settings)
        return ConfiguredDispatcher(strategy=strategy, client=client, settings=settings)

    def _fallback(
        self,
        decision: ProxyDecision,
        snapshot: EnvSnapshot,
        reason: str
    ) -> ConfiguredDispatcher:
        fallback = safe_default_strategy(decision.mode)
        if fallback is not decision.strategy and fallback is not TransportStrategy.NATIVE_HOST:
            try:
                dispatcher = self._construct(ProxyDecision(strategy=fallback, mode=decision.mode), snapshot)
                return replace(dispatcher, fallback_reason=reason)
            except Exception as e:
                error = DispatcherConstructionError(fallback, e)
                logger.warning(f"[net] {error}; using host transport")
                reason = f"{reason}; {error}"

        return ConfiguredDispatcher(
            strategy=TransportStrategy.NATIVE_HOST,
            settings=build_settings(
                ProxyDecision(strategy=TransportStrategy.NATIVE_HOST, mode=decision.mode),
                snapshot,
                timeout=self.timeout,
            ),
            fallback_reason=reason,
        )


def create_transport_factory(adapter: str = "httpx", timeout: Optional[float] = None) -> TransportFactory:
    """Create a new TransportFactory instance."""
    return TransportFactory(adapter=adapter, timeout=timeout if timeout is not None else DEFAULT_TIMEOUT)
