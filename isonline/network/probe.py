"""
Single TCP connection attempts against one address and port.
"""
import logging
import socket
from typing import Union

from ..models import IPAddress, ProbeOutcome

logger = logging.getLogger(__name__)


def _connect(address: Union[IPAddress, str], port: int, timeout: float):
    """Opens a connection and closes it again without sending anything."""
    with socket.create_connection((str(address), int(port)), timeout=float(timeout)) as sock:
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # The peer may already have closed its side.
            pass


def is_port_online(address: Union[IPAddress, str], port: int, timeout: float) -> bool:
    """
    Returns True if a TCP connection to address:port can be established
    within `timeout` seconds, False if the attempt timed out. The connection
    is closed right away.

    Any other failure, such as a refused connection or an unreachable
    network, is raised as the underlying OSError so the caller can tell a
    silent port from a broken one.
    """
    try:
        _connect(address, port, timeout)
    except (socket.timeout, TimeoutError):
        return False
    return True


def probe_port(address: Union[IPAddress, str], port: int, timeout: float) -> ProbeOutcome:
    """Like is_port_online, but reports failures as ProbeOutcome.ERROR instead of raising."""
    try:
        online = is_port_online(address, port, timeout)
    except OSError as e:
        logger.debug("Probe of %s port %d failed: %s", address, port, e)
        return ProbeOutcome.ERROR
    outcome = ProbeOutcome.OPEN if online else ProbeOutcome.CLOSED
    logger.debug("Probe of %s port %d: %s", address, port, outcome.value)
    return outcome
