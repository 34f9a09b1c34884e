"""
Proxy configuration and resolution package.
"""
from .types import (
    DeploymentMode,
    EnvSnapshot,
    ProxyDecision,
    ProxyDescriptor,
    ProxyProtocol,
    TransportStrategy,
)
from .errors import ProxyConfigError, ProxyConfigurationError, UnsupportedProtocolError
from .config import get_deployment_mode, is_standalone, load_env_file, read_environment
from .resolver import (
    decide,
    parse_proxy_url,
    resolve_proxy,
    safe_default_strategy,
    select_proxy_url,
    select_strategy,
)

__all__ = [
    "DeploymentMode",
    "EnvSnapshot",
    "ProxyDecision",
    "ProxyDescriptor",
    "ProxyProtocol",
    "TransportStrategy",
    "ProxyConfigError",
    "ProxyConfigurationError",
    "UnsupportedProtocolError",
    "get_deployment_mode",
    "is_standalone",
    "load_env_file",
    "read_environment",
    "decide",
    "parse_proxy_url",
    "resolve_proxy",
    "safe_default_strategy",
    "select_proxy_url",
    "select_strategy",
]
