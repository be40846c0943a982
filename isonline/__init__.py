"""
isonline - check whether a TCP port is reachable on one or many hosts.
"""

from .checker import TcpPortCheck
from .errors import ConfigurationError, HostResolutionError
from .models import AddressFamily, CheckConfig, CheckStrategy, Host, ProbeOutcome
from .network import (
    configure_pool,
    expand_subnets,
    is_port_online,
    probe_port,
    resolve_host,
    resolve_hosts,
)

__version__ = "0.1.0"

__all__ = [
    "AddressFamily",
    "CheckConfig",
    "CheckStrategy",
    "ConfigurationError",
    "Host",
    "HostResolutionError",
    "ProbeOutcome",
    "TcpPortCheck",
    "configure_pool",
    "expand_subnets",
    "is_port_online",
    "probe_port",
    "resolve_host",
    "resolve_hosts",
]
