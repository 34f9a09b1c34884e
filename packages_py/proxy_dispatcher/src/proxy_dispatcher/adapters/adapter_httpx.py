"""
Adapter for httpx library.
"""
import ssl
import logging
from typing import Any, Dict, Optional, Union

import httpx
from httpx_socks import AsyncProxyTransport

from .base import BaseAdapter
from ..models import FetchFunction, FetchTarget, RequestOptions, TransportSettings

logger = logging.getLogger(__name__)

SOCKS_SCHEMES = ("socks", "socks4", "socks5")

# Fetch options that can be merged into an existing httpx.Request
REQUEST_MERGE_OPTIONS = ("method", "headers", "params", "timeout", "extensions")


def _scheme(url: str) -> str:
    return url.split("://", 1)[0].lower() if "://" in url else ""


class HttpxAdapter(BaseAdapter):
    """Adapter for httpx library."""

    @property
    def name(self) -> str:
        return "httpx"

    def get_verify(self, settings: TransportSettings) -> Union[bool, ssl.SSLContext]:
        """TLS verification argument for httpx."""
        if not settings.verify_ssl:
            return False
        if settings.ca_bundle:
            return ssl.create_default_context(cafile=settings.ca_bundle)
        return True

    def create_socks_transport(self, proxy_url: str, verify: Any) -> AsyncProxyTransport:
        """Build a SOCKS transport bound to ``proxy_url``.

        Generic ``socks://`` has no version; the transport negotiates SOCKS5.
        """
        if _scheme(proxy_url) == "socks":
            proxy_url = "socks5://" + proxy_url.split("://", 1)[1]
        return AsyncProxyTransport.from_url(proxy_url, verify=verify)

    def create_proxy_transport(self, proxy_url: str, verify: Any) -> httpx.AsyncBaseTransport:
        if _scheme(proxy_url) in SOCKS_SCHEMES:
            return self.create_socks_transport(proxy_url, verify)
        return httpx.AsyncHTTPTransport(proxy=proxy_url, verify=verify)

    def get_client_kwargs(self, settings: TransportSettings) -> Dict[str, Any]:
        """Build kwargs for httpx.AsyncClient."""
        verify = self.get_verify(settings)
        kwargs: Dict[str, Any] = {
            "timeout": settings.timeout,
            "verify": verify,
            # httpx reads proxy env vars when trust_env is True; we configure
            # everything explicitly instead.
            "trust_env": settings.trust_env,
        }

        if settings.mounts:
            kwargs["mounts"] = {
                pattern: self.create_proxy_transport(url, verify) if url else None
                for pattern, url in settings.mounts.items()
            }
        elif settings.proxy_url:
            kwargs["transport"] = self.create_proxy_transport(settings.proxy_url, verify)

        return kwargs

    def create_client(self, settings: TransportSettings) -> httpx.AsyncClient:
        """Create httpx.AsyncClient."""
        kwargs = self.get_client_kwargs(settings)
        logger.debug(
            f"Creating httpx.AsyncClient: trust_env={kwargs['trust_env']}, "
            f"transport={'transport' in kwargs}, mounts={list(kwargs.get('mounts', {}).keys())}"
        )
        return httpx.AsyncClient(**kwargs)

    def create_host_client(self, settings: TransportSettings) -> httpx.AsyncClient:
        """httpx defaults: proxies and certificates come from the environment.

        With ``trust_env`` off the client ignores the environment and takes
        TLS options from ``settings`` instead.
        """
        if settings.trust_env:
            logger.debug("Creating default httpx.AsyncClient for host transport")
            return httpx.AsyncClient(timeout=settings.timeout)

        logger.debug("Creating httpx.AsyncClient for host transport without environment proxies")
        return httpx.AsyncClient(
            timeout=settings.timeout,
            verify=self.get_verify(settings),
            trust_env=False,
        )

    def merge_request(self, request: httpx.Request, opts: Dict[str, Any]) -> httpx.Request:
        """Apply fetch options to a prepared request.

        ``method``, ``headers``, ``params``, ``timeout`` and ``extensions``
        are merged into a copy; options that would replace the body or
        cookies of a prepared request raise ``TypeError``.
        """
        unsupported = sorted(set(opts) - set(REQUEST_MERGE_OPTIONS))
        if unsupported:
            raise TypeError(f"Options {unsupported} cannot be applied to an httpx.Request; set them on the request")
        if not opts:
            return request

        headers = httpx.Headers(request.headers)
        headers.update(opts.get("headers") or {})

        url = request.url
        if opts.get("params"):
            url = url.copy_merge_params(opts["params"])

        extensions = dict(request.extensions)
        extensions.update(opts.get("extensions") or {})
        if "timeout" in opts:
            extensions["timeout"] = httpx.Timeout(opts["timeout"]).as_dict()

        return httpx.Request(
            str(opts.get("method", request.method)).upper(),
            url,
            headers=headers,
            stream=request.stream,
            extensions=extensions,
        )

    def bind_fetch(self, client: httpx.AsyncClient) -> FetchFunction:
        async def _fetch(target: FetchTarget, options: Optional[RequestOptions] = None) -> httpx.Response:
            opts: Dict[str, Any] = dict(options or {})
            follow_redirects = opts.pop("follow_redirects", True)
            stream = opts.pop("stream", False)

            if isinstance(target, httpx.Request):
                request = self.merge_request(target, opts)
            else:
                method = str(opts.pop("method", "GET")).upper()
                request = client.build_request(method, target, **opts)

            return await client.send(request, stream=stream, follow_redirects=follow_redirects)

        return _fetch
