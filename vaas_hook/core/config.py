"""Configuration for the VaaS hook service.

Provides strongly-typed settings using Pydantic and a loader from environment
variables with defaults suitable for local development.
"""

from __future__ import annotations

import os
from importlib.metadata import PackageNotFoundError, version
from pydantic import BaseModel, AnyUrl, ValidationError
from typing import cast


class Settings(BaseModel):
    """Pydantic settings for the VaaS hook."""
    # Base URL of the VaaS control plane, API paths are appended to it
    vaas_api_host: AnyUrl
    vaas_username: str = "admin"
    vaas_api_key: str = ""
    request_timeout_s: float = 5.0
    task_poll_interval_s: float = 1.0
    task_max_wait_s: float = 90.0
    datacenter: str | None = None
    host_ip: str | None = None
    environment: str = "local"
    debug: bool = False
    sentry_dsn: str | None = None
    release: str = "0.0.0"


def _release() -> str:
    """Installed package version, used as the Sentry release."""
    try:
        return version("vaas-hook")
    except PackageNotFoundError:
        return "0.0.0"


def load_settings() -> Settings:
    """Load settings from environment variables and return a Settings object."""
    try:
        return Settings(
            vaas_api_host=cast(AnyUrl, os.getenv("VAAS_API_HOST", "http://localhost:3030")),
            vaas_username=os.getenv("VAAS_API_USERNAME", "admin"),
            vaas_api_key=os.getenv("VAAS_API_KEY", ""),
            request_timeout_s=float(os.getenv("REQUEST_TIMEOUT_S", "5.0")),
            task_poll_interval_s=float(os.getenv("TASK_POLL_INTERVAL_S", "1.0")),
            task_max_wait_s=float(os.getenv("TASK_MAX_WAIT_S", "90.0")),
            datacenter=os.getenv("DATACENTER") or None,
            host_ip=os.getenv("HOST_IP") or None,
            environment=os.getenv("ENVIRONMENT", "local"),
            debug=os.getenv("DEBUG", "false").lower() in ("1", "true", "yes"),
            sentry_dsn=os.getenv("SENTRY_DSN") or None,
            release=_release(),
        )
    except (ValidationError, ValueError) as e:
        raise RuntimeError(f"Invalid configuration: {e}") from e


settings = load_settings()
