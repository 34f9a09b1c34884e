"""
Proxy URL resolution and transport strategy selection.

Everything here is a pure function of an ``EnvSnapshot``; nothing reads
``os.environ`` directly and nothing builds a client.
"""
import re
import logging
from typing import Optional, Tuple
from urllib.parse import urlsplit

from .errors import ProxyConfigurationError, UnsupportedProtocolError
from .types import (
    DEFAULT_PORTS,
    DeploymentMode,
    EnvSnapshot,
    ProxyDecision,
    ProxyDescriptor,
    ProxyProtocol,
    TransportStrategy,
)

logger = logging.getLogger(__name__)

_KNOWN_SCHEMES = {p.value: p for p in ProxyProtocol if p is not ProxyProtocol.UNSUPPORTED}

# host:port with no scheme, e.g. "proxy.example:3128"
_BARE_HOST_PORT = re.compile(r"^(?P<host>[^:/@\s]+):(?P<port>\d+)/?$")


def select_proxy_url(snapshot: EnvSnapshot) -> Optional[Tuple[str, Optional[str]]]:
    """Pick the proxy URL to honour and the variable it came from.

    The HTTPS pair takes precedence over the HTTP pair unconditionally.
    """
    if snapshot.https_proxy:
        logger.debug(f"Using {snapshot.https_proxy_source or 'https_proxy'}")
        return snapshot.https_proxy, snapshot.https_proxy_source
    if snapshot.http_proxy:
        logger.debug(f"Using {snapshot.http_proxy_source or 'http_proxy'}")
        return snapshot.http_proxy, snapshot.http_proxy_source
    logger.debug("No proxy URL found")
    return None


def parse_proxy_url(raw: Optional[str], source: Optional[str] = None) -> Optional[ProxyDescriptor]:
    """Parse a proxy URL into a ``ProxyDescriptor``.

    Returns None for empty input. The URL must spell out its scheme: a bare
    ``host:port`` is classified as unsupported rather than guessed.

    Raises:
        ProxyConfigurationError: if the URL cannot be parsed.
    """
    if raw is None or not raw.strip():
        return None
    raw = raw.strip()

    if "://" not in raw:
        bare = _BARE_HOST_PORT.match(raw)
        if bare:
            return ProxyDescriptor(
                raw_url=raw,
                protocol=ProxyProtocol.UNSUPPORTED,
                host=bare.group("host"),
                port=int(bare.group("port")),
                source=source,
            )
        raise ProxyConfigurationError(raw, "missing scheme", source=source)

    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError as e:
        raise ProxyConfigurationError(raw, str(e), source=source) from e

    scheme = parts.scheme.lower()
    if not scheme:
        raise ProxyConfigurationError(raw, "missing scheme", source=source)
    if not parts.hostname:
        raise ProxyConfigurationError(raw, "missing host", source=source)

    protocol = _KNOWN_SCHEMES.get(scheme, ProxyProtocol.UNSUPPORTED)
    if port is None:
        port = DEFAULT_PORTS.get(protocol, 0)

    return ProxyDescriptor(
        raw_url=raw,
        protocol=protocol,
        host=parts.hostname,
        port=port,
        has_auth=parts.username is not None or parts.password is not None,
        source=source,
    )


def resolve_proxy(snapshot: EnvSnapshot) -> Optional[ProxyDescriptor]:
    """Resolve the configured proxy, or None when there is none.

    A malformed URL is logged and treated as "no proxy configured".
    """
    selected = select_proxy_url(snapshot)
    if selected is None:
        return None
    raw, source = selected
    try:
        return parse_proxy_url(raw, source=source)
    except ProxyConfigurationError as e:
        logger.warning(f"[net] {e}; ignoring proxy configuration")
        return None


def select_strategy(
    descriptor: Optional[ProxyDescriptor],
    mode: DeploymentMode
) -> TransportStrategy:
    """Map (protocol class, deployment mode) to a transport strategy.

    SOCKS always needs an explicit dispatcher: the host cannot negotiate it.
    HTTP/HTTPS proxies are left to the host when embedded. Standalone runs
    always go through a dispatcher, proxied or not.
    """
    standalone = mode is DeploymentMode.STANDALONE

    if descriptor is None:
        return TransportStrategy.UNMODIFIED_DEFAULT if standalone else TransportStrategy.NATIVE_HOST

    protocol = descriptor.protocol
    if protocol.is_socks:
        return TransportStrategy.PROXY_DISPATCHER
    if protocol.is_http:
        return TransportStrategy.ENV_PROXY_DISPATCHER if standalone else TransportStrategy.NATIVE_HOST

    scheme = descriptor.raw_url.split("://", 1)[0] if "://" in descriptor.raw_url else ""
    error = UnsupportedProtocolError(scheme or "<none>", source=descriptor.source)
    logger.warning(f"[net] {error}, using default transport")
    return TransportStrategy.NATIVE_HOST


def safe_default_strategy(mode: DeploymentMode) -> TransportStrategy:
    """Strategy to fall back to when a dispatcher cannot be built."""
    if mode is DeploymentMode.STANDALONE:
        return TransportStrategy.UNMODIFIED_DEFAULT
    return TransportStrategy.NATIVE_HOST


def decide(snapshot: EnvSnapshot) -> ProxyDecision:
    """Run the parser and the selector over a snapshot."""
    descriptor = resolve_proxy(snapshot)
    mode = snapshot.deployment_mode
    strategy = select_strategy(descriptor, mode)
    logger.debug(
        f"Proxy decision: mode={mode.value}, "
        f"protocol={descriptor.protocol.value if descriptor else 'none'}, strategy={strategy.value}"
    )
    return ProxyDecision(strategy=strategy, mode=mode, descriptor=descriptor)
