"""
Data models for proxy configuration.
"""
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field


class ProxyProtocol(str, Enum):
    """Protocol class of a proxy URL."""
    HTTP = "http"
    HTTPS = "https"
    SOCKS = "socks"
    SOCKS4 = "socks4"
    SOCKS5 = "socks5"
    UNSUPPORTED = "unsupported"

    @property
    def is_socks(self) -> bool:
        return self in (ProxyProtocol.SOCKS, ProxyProtocol.SOCKS4, ProxyProtocol.SOCKS5)

    @property
    def is_http(self) -> bool:
        return self in (ProxyProtocol.HTTP, ProxyProtocol.HTTPS)


class DeploymentMode(str, Enum):
    """Where the process runs.

    EMBEDDED: inside a host application that negotiates HTTP/HTTPS proxies
    at the platform level.
    STANDALONE: no such host; proxies must be configured explicitly.
    """
    EMBEDDED = "embedded"
    STANDALONE = "standalone"


class TransportStrategy(str, Enum):
    """Which transport the fetch facade delegates to."""
    NATIVE_HOST = "native_host"
    PROXY_DISPATCHER = "proxy_dispatcher"
    ENV_PROXY_DISPATCHER = "env_proxy_dispatcher"
    UNMODIFIED_DEFAULT = "unmodified_default"

    @property
    def uses_dispatcher(self) -> bool:
        """True when a client must be built instead of using the host transport."""
        return self is not TransportStrategy.NATIVE_HOST


# Port used when the proxy URL omits one.
DEFAULT_PORTS = {
    ProxyProtocol.HTTP: 80,
    ProxyProtocol.HTTPS: 443,
    ProxyProtocol.SOCKS: 1080,
    ProxyProtocol.SOCKS4: 1080,
    ProxyProtocol.SOCKS5: 1080,
}


class ProxyDescriptor(BaseModel):
    """A parsed proxy URL.

    Built by ``parse_proxy_url`` and discarded once the transport strategy
    has been chosen.
    """
    model_config = ConfigDict(frozen=True)

    raw_url: str = Field(description="Proxy URL exactly as found in the environment")
    protocol: ProxyProtocol = Field(description="Classified proxy protocol")
    host: str = Field(default="", description="Proxy hostname")
    port: int = Field(default=0, description="Proxy port, scheme default when omitted")
    has_auth: bool = Field(default=False, description="Whether the URL carries credentials")
    source: Optional[str] = Field(default=None, description="Environment variable the URL came from")

    @property
    def redacted_url(self) -> str:
        """The raw URL with the password masked, safe for logs."""
        if not self.has_auth or "://" not in self.raw_url:
            return self.raw_url
        parts = urlsplit(self.raw_url)
        userinfo = parts.username or ""
        if parts.password is not None:
            userinfo = f"{userinfo}:****"
        hostinfo = parts.netloc.rpartition("@")[2]
        return urlunsplit((parts.scheme, f"{userinfo}@{hostinfo}", parts.path, parts.query, parts.fragment))


class EnvSnapshot(BaseModel):
    """Immutable view of the proxy-related environment.

    Resolution functions take a snapshot instead of reading ``os.environ``
    so precedence rules can be tested without touching the process.
    """
    model_config = ConfigDict(frozen=True)

    http_proxy: Optional[str] = Field(default=None, description="http_proxy / HTTP_PROXY")
    https_proxy: Optional[str] = Field(default=None, description="https_proxy / HTTPS_PROXY")
    http_proxy_source: Optional[str] = Field(default=None, description="Variable name http_proxy came from")
    https_proxy_source: Optional[str] = Field(default=None, description="Variable name https_proxy came from")
    no_proxy: Optional[str] = Field(default=None, description="no_proxy / NO_PROXY")
    deployment_mode: DeploymentMode = Field(default=DeploymentMode.EMBEDDED)
    ssl_verify: bool = Field(default=True, description="False when TLS verification is disabled by env")
    ca_bundle: Optional[str] = Field(default=None, description="Path to an extra CA bundle")

    @classmethod
    def from_environ(cls, environ=None) -> "EnvSnapshot":
        """Read a snapshot from ``environ`` (defaults to ``os.environ``)."""
        from .config import read_environment
        return read_environment(environ)


class ProxyDecision(BaseModel):
    """Outcome of running the parser and the selector over a snapshot."""
    model_config = ConfigDict(frozen=True)

    strategy: TransportStrategy
    mode: DeploymentMode
    descriptor: Optional[ProxyDescriptor] = None
