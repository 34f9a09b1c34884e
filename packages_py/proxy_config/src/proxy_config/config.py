"""
Environment reading for proxy resolution.

Proxy variables are looked up as (lower-case, upper-case) pairs and the
first non-empty value wins. Values are read once into an ``EnvSnapshot``;
changing the environment afterwards requires a restart.
"""
import os
import logging
from typing import Mapping, Optional, Sequence, Tuple

from dotenv import load_dotenv

from .types import DeploymentMode, EnvSnapshot

logger = logging.getLogger(__name__)

HTTPS_PROXY_VARS = ("https_proxy", "HTTPS_PROXY")
HTTP_PROXY_VARS = ("http_proxy", "HTTP_PROXY")
NO_PROXY_VARS = ("no_proxy", "NO_PROXY")
STANDALONE_VAR = "IS_STANDALONE"
CA_BUNDLE_VARS = ("SSL_CERT_FILE", "REQUESTS_CA_BUNDLE")


def first_env(
    names: Sequence[str],
    environ: Optional[Mapping[str, str]] = None
) -> Tuple[Optional[str], Optional[str]]:
    """Return (value, name) of the first non-empty variable in ``names``."""
    env = os.environ if environ is None else environ
    for name in names:
        value = env.get(name)
        if value and value.strip():
            return value.strip(), name
    return None, None


def get_deployment_mode(environ: Optional[Mapping[str, str]] = None) -> DeploymentMode:
    """Standalone when IS_STANDALONE is set to any non-empty value, embedded otherwise.

    The flag is a presence check: "0" and "false" also mean standalone.
    """
    env = os.environ if environ is None else environ
    raw = env.get(STANDALONE_VAR, "")
    mode = DeploymentMode.STANDALONE if raw.strip() else DeploymentMode.EMBEDDED
    logger.debug(f"Resolved {STANDALONE_VAR}={raw!r} -> {mode.value}")
    return mode


def is_standalone(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Check if running without an embedding host."""
    return get_deployment_mode(environ) is DeploymentMode.STANDALONE


def is_ssl_verify_disabled_by_env(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Check if SSL verification is disabled by environment variables."""
    env = os.environ if environ is None else environ
    # Node.js compatibility
    if env.get("NODE_TLS_REJECT_UNAUTHORIZED") == "0":
        return True

    # Python convention
    if env.get("SSL_CERT_VERIFY") == "0":
        return True

    return False


def load_env_file(path: Optional[str] = None) -> bool:
    """Load a .env file into os.environ without overriding existing values.

    Must run before the first request; the transport is chosen once.
    """
    if path is not None and not os.path.exists(path):
        logger.debug(f".env file not found: {path}")
        return False
    loaded = load_dotenv(path, override=False)
    logger.debug(f".env file loaded={loaded} path={path or '<auto>'}")
    return loaded


def read_environment(environ: Optional[Mapping[str, str]] = None) -> EnvSnapshot:
    """Read the proxy-related environment into an immutable snapshot."""
    env = os.environ if environ is None else environ

    https_proxy, https_source = first_env(HTTPS_PROXY_VARS, env)
    http_proxy, http_source = first_env(HTTP_PROXY_VARS, env)
    no_proxy, _ = first_env(NO_PROXY_VARS, env)
    ca_bundle, _ = first_env(CA_BUNDLE_VARS, env)

    snapshot = EnvSnapshot(
        http_proxy=http_proxy,
        https_proxy=https_proxy,
        http_proxy_source=http_source,
        https_proxy_source=https_source,
        no_proxy=no_proxy,
        deployment_mode=get_deployment_mode(env),
        ssl_verify=not is_ssl_verify_disabled_by_env(env),
        ca_bundle=ca_bundle,
    )
    logger.debug(
        f"Environment snapshot: https_proxy set={bool(https_proxy)} ({https_source}), "
        f"http_proxy set={bool(http_proxy)} ({http_source}), "
        f"no_proxy set={bool(no_proxy)}, mode={snapshot.deployment_mode.value}"
    )
    return snapshot
