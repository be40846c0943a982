"""
Expands CIDR subnets in a target list into the individual host addresses.
"""
import ipaddress
import logging
from typing import Iterable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

_IPv4_UNSPECIFIED = ipaddress.IPv4Address("0.0.0.0")
_IPv4_BROADCAST = ipaddress.IPv4Address("255.255.255.255")
_IPv6_UNSPECIFIED = ipaddress.IPv6Address("::")


def _parse_network(target: str) -> Optional[Union[ipaddress.IPv4Network, ipaddress.IPv6Network]]:
    """Parses 'address/prefix'. Bare addresses are not networks here."""
    if '/' not in target:
        return None
    try:
        return ipaddress.ip_network(target, strict=False)
    except ValueError:
        return None


def _ipv4_hosts(net: ipaddress.IPv4Network) -> Iterator[str]:
    # hosts() drops the network and broadcast addresses, except for /31 and /32
    for ip in net.hosts():
        if ip == _IPv4_UNSPECIFIED or ip == _IPv4_BROADCAST:
            continue
        yield str(ip)


def _ipv6_hosts(net: ipaddress.IPv6Network) -> Iterator[str]:
    # No broadcast in IPv6, and the subnet-router anycast address is a valid target
    for ip in net:
        if ip == _IPv6_UNSPECIFIED:
            continue
        yield str(ip)


def expand_subnets(targets: Iterable[str]) -> List[str]:
    """
    Replaces every CIDR subnet in `targets` with its host addresses, in
    ascending order. Host names and bare IP addresses are passed through.
    Never fails: anything that is not a subnet is treated as a host name.
    """
    expanded: List[str] = []
    for target in targets:
        net = _parse_network(target)
        if net is None:
            expanded.append(target)
            continue

        before = len(expanded)
        if isinstance(net, ipaddress.IPv4Network):
            expanded.extend(_ipv4_hosts(net))
        else:
            expanded.extend(_ipv6_hosts(net))
        logger.debug("Expanded subnet %s into %d addresses", target, len(expanded) - before)

    return expanded
