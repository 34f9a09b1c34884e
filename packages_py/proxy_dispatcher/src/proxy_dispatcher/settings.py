"""
Settings for a secondary httpx client, consistent with the fetch facade.
"""
import logging
from typing import TYPE_CHECKING, Any, Dict

import httpx
from proxy_config import decide

from .models import FetchFunction

if TYPE_CHECKING:
    from .context import NetworkContext

logger = logging.getLogger(__name__)

# Fetch options used when a client hands its requests to the facade.
_TRANSPORT_FETCH_OPTIONS = {"stream": True, "follow_redirects": False}


class FetchTransport(httpx.AsyncBaseTransport):
    """httpx transport that sends every request through a fetch function.

    Redirects, cookies and auth stay with the client that owns this
    transport; the fetch function only performs the single request.
    """

    def __init__(self, fetch: FetchFunction):
        self._fetch = fetch

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        response = await self._fetch(request, dict(_TRANSPORT_FETCH_OPTIONS))

        if response.is_stream_consumed:
            # Already read (e.g. a canned response); hand over decoded bytes.
            headers = [
                (k, v) for k, v in response.headers.multi_items()
                if k.lower() not in ("content-encoding", "content-length", "transfer-encoding")
            ]
            return httpx.Response(
                status_code=response.status_code,
                headers=headers,
                content=response.content,
                extensions=response.extensions,
            )

        return httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            stream=response.stream,
            extensions=response.extensions,
        )


def client_settings_for(context: "NetworkContext") -> Dict[str, Any]:
    """Settings to spread into ``httpx.AsyncClient(**settings)``.

    When the facade is backed by its own dispatcher, the secondary client is
    routed through the facade so both see the same proxy. Otherwise it gets
    no settings and keeps its default transport, which inherits the host's
    proxy handling. The decision is re-derived from the environment without
    building the facade's dispatcher. Never raises.
    """
    try:
        decision = decide(context.snapshot())
        if decision.strategy.uses_dispatcher:
            logger.debug(f"Secondary client routed through fetch ({decision.strategy.value})")
            return {"transport": FetchTransport(context.fetch)}

        logger.debug("Secondary client uses its default transport")
        return {}
    except Exception as e:
        logger.warning(f"[net] Failed to compute client settings, using default: {e}")
        return {}
