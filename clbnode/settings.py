from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_AUTH_URL = "https://identity.api.rackspacecloud.com/v2.0/"
DEFAULT_APP_PORT = 80


def _env_str(env: Mapping[str, str], name: str) -> str | None:
    raw = env.get(name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def _env_int(env: Mapping[str, str], name: str, default: int | None = None) -> int | None:
    raw = _env_str(env, name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"${name} [{raw}] is not an integer") from None


@dataclass(frozen=True)
class Settings:
    # Credentials
    username: str
    api_key: str = field(repr=False)
    region: str

    # Target
    load_balancer_id: int
    app_port: int = DEFAULT_APP_PORT

    # Address overrides (optional)
    servicenet_ipv4: str | None = None
    publicnet_ipv4: str | None = None

    # Remote API knobs
    auth_url: str = DEFAULT_AUTH_URL
    http_timeout_s: float = 30.0
    ready_timeout_s: int = 120
    ready_poll_s: int = 5

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Read and validate configuration once, before any network call."""
        env = os.environ if environ is None else environ

        username = _env_str(env, "OS_USERNAME")
        api_key = _env_str(env, "OS_PASSWORD")
        region = _env_str(env, "OS_REGION_NAME")
        if not (username and api_key and region):
            raise ConfigurationError("One or more of $OS_USERNAME, $OS_PASSWORD, and $OS_REGION_NAME not set")

        load_balancer_id = _env_int(env, "LOAD_BALANCER_ID")
        if load_balancer_id is None:
            raise ConfigurationError("$LOAD_BALANCER_ID must be set")

        if _env_str(env, "APP_PORT") is None:
            logger.info("$APP_PORT not set, defaulting to %d", DEFAULT_APP_PORT)
        app_port = _env_int(env, "APP_PORT", DEFAULT_APP_PORT)
        if not 1 <= app_port <= 65535:
            raise ConfigurationError(f"$APP_PORT [{app_port}] is out of range 1-65535")

        ready_timeout_s = _env_int(env, "CLB_READY_TIMEOUT_S", 120)
        ready_poll_s = _env_int(env, "CLB_READY_POLL_S", 5)
        http_timeout_s = _env_int(env, "CLB_HTTP_TIMEOUT_S", 30)
        if ready_poll_s <= 0 or http_timeout_s <= 0:
            raise ConfigurationError("$CLB_READY_POLL_S and $CLB_HTTP_TIMEOUT_S must be positive")

        return cls(
            username=username,
            api_key=api_key,
            region=region,
            load_balancer_id=load_balancer_id,
            app_port=app_port,
            servicenet_ipv4=_env_str(env, "RAX_SERVICENET_IPV4"),
            publicnet_ipv4=_env_str(env, "RAX_PUBLICNET_IPV4"),
            auth_url=_env_str(env, "OS_AUTH_URL") or DEFAULT_AUTH_URL,
            http_timeout_s=float(http_timeout_s),
            ready_timeout_s=max(0, ready_timeout_s),
            ready_poll_s=ready_poll_s,
        )
