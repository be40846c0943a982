"""
Network-related building blocks for isonline.
"""

from .pool import WorkerPool, configure_pool, default_worker_count, get_pool
from .probe import is_port_online, probe_port
from .resolver import resolve_host, resolve_hostname, resolve_hosts
from .subnets import expand_subnets

__all__ = [
    "WorkerPool",
    "configure_pool",
    "default_worker_count",
    "get_pool",
    "is_port_online",
    "probe_port",
    "resolve_host",
    "resolve_hostname",
    "resolve_hosts",
    "expand_subnets",
]
