"""
config.py

Responsibility: Loads BIG-IP connection settings from environment variables,
builds the shared httpx.AsyncClient, and installs the logging format.
Does NOT: make HTTP calls, reconcile nodes, or persist state.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import httpx

from exceptions import ConfigLoadError

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class BigIpConfig:
    """BIG-IP management connection configuration."""

    host: str
    username: str = "admin"
    password: str = field(default="", repr=False)  # Never log password
    verify_ssl: bool = True
    timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> BigIpConfig:
        """
        Loads the configuration from environment variables.

        Returns:
            A populated BigIpConfig.

        Raises:
            ConfigLoadError: If BIGIP_HOST or BIGIP_PASSWORD is missing, or
                BIGIP_TIMEOUT is not a positive number.
        """
        host = os.getenv("BIGIP_HOST", "").strip()
        if not host:
            raise ConfigLoadError("BIGIP_HOST environment variable must be set.")

        password = os.getenv("BIGIP_PASSWORD", "")
        if not password:
            raise ConfigLoadError(
                "BIGIP_PASSWORD environment variable must be set. "
                "Management password cannot be empty."
            )

        raw_timeout = os.getenv("BIGIP_TIMEOUT", "30")
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ConfigLoadError(f"BIGIP_TIMEOUT must be a number, got {raw_timeout!r}") from exc
        if timeout <= 0:
            raise ConfigLoadError(f"BIGIP_TIMEOUT must be positive, got {raw_timeout!r}")

        return cls(
            host=host,
            username=os.getenv("BIGIP_USERNAME", "admin"),
            password=password,
            verify_ssl=os.getenv("BIGIP_VERIFY_SSL", "true").strip().lower() in _TRUE_VALUES,
            timeout=timeout,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def build_http_client(config: BigIpConfig) -> httpx.AsyncClient:
    """
    Creates the long-lived HTTP client used for all management API calls.

    The caller owns the client and must close it (``await client.aclose()``
    or ``async with``).

    Args:
        config: The loaded BIG-IP configuration.

    Returns:
        An httpx.AsyncClient honouring the SSL and timeout settings.
    """
    if not config.verify_ssl:
        logger.warning("SSL verification disabled for BIG-IP host %s", config.host)
    return httpx.AsyncClient(verify=config.verify_ssl, timeout=config.timeout)


def configure_logging(level: str = "INFO") -> None:
    """
    Installs the root logging format used by every module logger.

    Args:
        level: Level name such as "DEBUG" or "INFO"; unknown names fall back
            to INFO.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=_LOG_FORMAT,
    )
