"""
Transport settings derived from a proxy decision.
"""
import logging
import ipaddress
from typing import Dict, Optional

from proxy_config import (
    EnvSnapshot,
    ProxyConfigurationError,
    ProxyDecision,
    ProxyProtocol,
    TransportStrategy,
    parse_proxy_url,
)
from .models import TransportSettings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _is_ip(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname.strip("[]"))
    except ValueError:
        return False
    return True


def no_proxy_mounts(no_proxy: Optional[str]) -> Dict[str, Optional[str]]:
    """Translate a no_proxy list into httpx mount patterns that bypass the proxy.

    Follows the conventions httpx applies to NO_PROXY: "*" bypasses
    everything, IPs and "localhost" match exactly, other names also match
    their subdomains.
    """
    mounts: Dict[str, Optional[str]] = {}
    if not no_proxy:
        return mounts
    for entry in no_proxy.split(","):
        hostname = entry.strip()
        if not hostname:
            continue
        if hostname == "*":
            return {"all://": None}
        if "://" in hostname:
            mounts[hostname] = None
        elif _is_ip(hostname):
            host = hostname.strip("[]")
            mounts[f"all://[{host}]" if ":" in host else f"all://{host}"] = None
        elif hostname.lower() == "localhost":
            mounts["all://localhost"] = None
        else:
            mounts[f"all://*{hostname.lstrip('.')}"] = None
    return mounts


def _mountable_proxy(raw: Optional[str], source: Optional[str]) -> Optional[str]:
    """Return ``raw`` when it is a usable proxy URL.

    SOCKS URLs are mountable too; the adapter builds a SOCKS transport for
    them, so a SOCKS ``http_proxy`` next to an HTTP ``https_proxy`` still
    proxies plain http:// traffic.
    """
    if not raw:
        return None
    try:
        descriptor = parse_proxy_url(raw, source=source)
    except ProxyConfigurationError as e:
        logger.warning(f"[net] {e}; not mounting it")
        return None
    if descriptor is None or descriptor.protocol is ProxyProtocol.UNSUPPORTED:
        logger.warning(f"[net] {source or 'proxy variable'} has an unsupported scheme; not mounting it")
        return None
    return descriptor.raw_url


def env_proxy_mounts(snapshot: EnvSnapshot) -> Dict[str, Optional[str]]:
    """Per-scheme proxy mounts for HTTP/HTTPS proxies.

    http:// uses the HTTP proxy and https:// the HTTPS proxy, each falling
    back to the other. no_proxy entries are mounted as direct.
    """
    http_proxy = _mountable_proxy(snapshot.http_proxy, snapshot.http_proxy_source)
    https_proxy = _mountable_proxy(snapshot.https_proxy, snapshot.https_proxy_source)
    http_proxy, https_proxy = http_proxy or https_proxy, https_proxy or http_proxy

    bypass = no_proxy_mounts(snapshot.no_proxy)
    if "all://" in bypass:
        logger.debug("no_proxy='*', all traffic goes direct")
        return bypass

    mounts: Dict[str, Optional[str]] = {}
    if http_proxy:
        mounts["http://"] = http_proxy
    if https_proxy:
        mounts["https://"] = https_proxy
    mounts.update(bypass)
    return mounts


def env_proxies_are_trusted(snapshot: EnvSnapshot) -> bool:
    """Whether httpx may read the proxy variables itself.

    httpx guesses a scheme for bare values and rejects SOCKS4 or unknown
    schemes, so the host client only trusts the environment when every
    proxy variable set there is a well-formed HTTP/HTTPS proxy URL.
    """
    for raw, source in (
        (snapshot.https_proxy, snapshot.https_proxy_source),
        (snapshot.http_proxy, snapshot.http_proxy_source),
    ):
        if not raw:
            continue
        try:
            descriptor = parse_proxy_url(raw, source=source)
        except ProxyConfigurationError:
            return False
        if descriptor is None or not descriptor.protocol.is_http:
            return False
    return True


def build_settings(
    decision: ProxyDecision,
    snapshot: EnvSnapshot,
    timeout: float = DEFAULT_TIMEOUT
) -> TransportSettings:
    """Build adapter settings for a decided strategy."""
    settings = TransportSettings(
        verify_ssl=snapshot.ssl_verify,
        ca_bundle=snapshot.ca_bundle,
        timeout=timeout,
        trust_env=False,
    )

    if decision.strategy is TransportStrategy.PROXY_DISPATCHER and decision.descriptor:
        # Credentials, host, port and scheme are used verbatim.
        settings.proxy_url = decision.descriptor.raw_url
    elif decision.strategy is TransportStrategy.ENV_PROXY_DISPATCHER:
        settings.mounts = env_proxy_mounts(snapshot)
        if decision.descriptor:
            settings.proxy_url = decision.descriptor.raw_url
    elif decision.strategy is TransportStrategy.NATIVE_HOST:
        # The host transport reads the platform/env configuration itself,
        # unless that configuration is one httpx would misread.
        settings.trust_env = env_proxies_are_trusted(snapshot)
        if not settings.trust_env:
            logger.debug("Proxy variables are not usable by the host transport; ignoring them")

    logger.debug(
        f"Built settings for {decision.strategy.value}: proxy={settings.proxy_url is not None}, "
        f"mounts={list(settings.mounts.keys())}, verify_ssl={settings.verify_ssl}"
    )
    return settings
