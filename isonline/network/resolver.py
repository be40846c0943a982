"""
Turns target strings into Host records, resolving host names via DNS.
"""
from __future__ import annotations
import ipaddress
import logging
import socket
from typing import Iterable, List, Optional, Set

from ..errors import HostResolutionError
from ..models import Host, IPAddress
from .pool import WorkerPool, get_pool

logger = logging.getLogger(__name__)


def _parse_ip_literal(name: str) -> Optional[IPAddress]:
    try:
        return ipaddress.ip_address(name)
    except ValueError:
        return None


def resolve_hostname(name: str) -> List[IPAddress]:
    """
    Returns every address `name` resolves to, IPv4 and IPv6, in the order the
    system resolver returned them. An IP literal is returned as is, without
    a lookup.
    """
    literal = _parse_ip_literal(name)
    if literal is not None:
        return [literal]

    try:
        infos = socket.getaddrinfo(name, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as e:
        raise HostResolutionError(name, str(e)) from e

    addresses: List[IPAddress] = []
    seen = set()
    for family, _type, _proto, _canonname, sockaddr in infos:
        if family not in (socket.AF_INET, socket.AF_INET6):
            continue
        ip = ipaddress.ip_address(sockaddr[0])
        if ip not in seen:
            seen.add(ip)
            addresses.append(ip)

    if not addresses:
        raise HostResolutionError(name, "no addresses returned")
    return addresses


def resolve_host(name: str) -> Host:
    """Builds a Host for one target. Raises HostResolutionError if that is not possible."""
    host = Host(name=name, addresses=tuple(resolve_hostname(name)))
    logger.debug("Resolved %s to %s", name, ", ".join(str(a) for a in host.addresses))
    return host


def _try_resolve(name: str) -> Optional[Host]:
    try:
        return resolve_host(name)
    except HostResolutionError as e:
        logger.info("%s", e)
        return None


def resolve_hosts(targets: Iterable[str], pool: Optional[WorkerPool] = None) -> Set[Host]:
    """
    Resolves all targets in parallel and returns the hosts that could be
    resolved. Targets that fail are dropped; callers find them by comparing
    the returned names against their own list.
    """
    pool = pool or get_pool()
    names = list(dict.fromkeys(targets))
    return {host for _name, host in pool.map_unordered(_try_resolve, names) if host is not None}
