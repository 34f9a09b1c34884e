"""
Process-wide fetch with proxy support.

Use ``fetch`` from this module instead of creating ad-hoc httpx clients:

    >>> from proxy_dispatcher import fetch
    >>> response = await fetch("https://api.example.com/models")

For a long-lived ``httpx.AsyncClient`` (e.g. handed to an SDK), spread
``get_client_settings()`` into its constructor so it gets the same proxy:

    >>> client = httpx.AsyncClient(timeout=10.0, **get_client_settings())

Proxy configuration comes from ``http_proxy``/``HTTP_PROXY`` and
``https_proxy``/``HTTPS_PROXY`` (HTTPS wins), with ``no_proxy``/``NO_PROXY``
honoured in standalone mode. URLs must include a scheme: http, https,
socks, socks4 or socks5. ``IS_STANDALONE`` selects standalone mode.

Limitations: settings are read once (restart required for changes), PAC
files are not supported, and a SOCKS proxy is used for both HTTP and HTTPS.
"""
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from .context import NetworkContext
from .models import ConfiguredDispatcher, FetchFunction, FetchTarget, RequestOptions

# Global default context
_default_context = NetworkContext()


def get_default_context() -> NetworkContext:
    return _default_context


def fetch(target: FetchTarget, options: Optional[RequestOptions] = None) -> Awaitable[httpx.Response]:
    """Proxy-aware fetch using the default context."""
    return _default_context.fetch(target, options)


def get_client_settings() -> Dict[str, Any]:
    """Settings for a secondary ``httpx.AsyncClient`` using the default context."""
    return _default_context.get_client_settings()


def get_dispatcher() -> ConfiguredDispatcher:
    """The dispatcher backing ``fetch``, built on first call."""
    return _default_context.get_dispatcher()


def with_override(replacement: FetchFunction, callback: Callable[[], Any]) -> Any:
    """Replace ``fetch`` for the duration of ``callback()``. For tests only.

    If ``callback`` returns an awaitable, ``fetch`` is restored once it
    settles; await the returned value.
    """
    return _default_context.with_override(replacement, callback)


async def aclose() -> None:
    """Close the clients owned by the default context."""
    await _default_context.aclose()
