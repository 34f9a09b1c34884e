"""
Data models for proxy dispatcher.
"""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, TypedDict, Union

import httpx
from proxy_config import TransportStrategy

FetchTarget = Union[str, httpx.URL, httpx.Request]


class RequestOptions(TypedDict, total=False):
    """Options for a fetch call, passed through to httpx unchanged."""
    method: str
    headers: Dict[str, str]
    params: Dict[str, Any]
    json: Any
    data: Any
    content: Any
    files: Any
    cookies: Dict[str, str]
    timeout: Union[float, httpx.Timeout, None]
    follow_redirects: bool
    stream: bool
    extensions: Dict[str, Any]


FetchFunction = Callable[[FetchTarget, Optional[RequestOptions]], Awaitable[httpx.Response]]


@dataclass
class TransportSettings:
    """Resolved transport configuration handed to an adapter."""
    proxy_url: Optional[str] = None
    # URL pattern -> proxy URL, or None for a direct connection
    mounts: Dict[str, Optional[str]] = field(default_factory=dict)
    verify_ssl: bool = True
    ca_bundle: Optional[str] = None
    timeout: float = 30.0
    trust_env: bool = False


@dataclass(frozen=True)
class ConfiguredDispatcher:
    """The transport chosen for this process.

    ``client`` is None for the native host strategy, where the host-provided
    fetch is used unchanged.
    """
    strategy: TransportStrategy
    client: Optional[httpx.AsyncClient] = None
    settings: Optional[TransportSettings] = None
    fallback_reason: Optional[str] = None

    @property
    def proxy_url(self) -> Optional[str]:
        return self.settings.proxy_url if self.settings else None

    @property
    def mounts(self) -> Dict[str, Optional[str]]:
        return dict(self.settings.mounts) if self.settings else {}

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()
