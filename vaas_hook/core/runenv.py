"""Facts about the host the hook runs on: address, datacenter, environment."""
from __future__ import annotations

import logging
import socket

from vaas_hook.core.config import settings

log = logging.getLogger("vaas.runenv")

KNOWN_ENVIRONMENTS = ("local", "dev", "test", "prod")

# Nothing is sent; connecting a UDP socket only selects the outbound interface.
_PROBE_ADDRESS = ("10.255.255.255", 1)


class RuntimeEnvironmentError(RuntimeError):
    """Raised when a runtime fact cannot be determined."""


def ip() -> str:
    """Return the address this host advertises to the load balancer."""
    if settings.host_ip:
        return settings.host_ip
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        try:
            s.connect(_PROBE_ADDRESS)
            return s.getsockname()[0]
        except OSError as e:
            log.warning("Could not detect host address, using loopback: %s", e)
            return "127.0.0.1"


def datacenter() -> str:
    """Return the datacenter symbol the host lives in."""
    if not settings.datacenter:
        raise RuntimeEnvironmentError("Datacenter not set, export DATACENTER")
    return settings.datacenter


def environment() -> str:
    """Return the deployment environment name."""
    env = settings.environment.lower()
    if env not in KNOWN_ENVIRONMENTS:
        raise RuntimeEnvironmentError(f"Unknown environment {settings.environment!r}")
    return env
