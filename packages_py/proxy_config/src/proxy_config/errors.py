from typing import Optional


class ProxyConfigError(Exception):
    """Base exception for proxy configuration errors."""
    pass


class ProxyConfigurationError(ProxyConfigError):
    def __init__(self, raw_url: str, reason: str, source: Optional[str] = None):
        origin = f" from {source}" if source else ""
        msg = f"Malformed proxy URL{origin}: {reason}"
        super().__init__(msg)
        self.raw_url = raw_url
        self.reason = reason
        self.source = source


class UnsupportedProtocolError(ProxyConfigError):
    def __init__(self, protocol: str, source: Optional[str] = None):
        origin = f" in {source}" if source else ""
        msg = f"Unsupported proxy protocol '{protocol}'{origin}"
        super().__init__(msg)
        self.protocol = protocol
        self.source = source
