"""
Decides whether hosts are online by probing a TCP port on their addresses.
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .models import CheckConfig, CheckStrategy, Host, IPAddress, ProbeOutcome
from .network.pool import WorkerPool, get_pool
from .network.probe import probe_port

logger = logging.getLogger(__name__)


class TcpPortCheck:
    """
    Checks a TCP port on every eligible address of a host and combines the
    per-address results with the configured strategy.

    A probe that fails with an I/O error counts as a closed port, so one bad
    address never aborts a batch. Use network.is_port_online directly when
    the error itself matters.
    """

    def __init__(self, config: Optional[CheckConfig] = None, pool: Optional[WorkerPool] = None):
        self.config = config or CheckConfig()
        self._pool = pool

    @property
    def pool(self) -> WorkerPool:
        return self._pool or get_pool()

    def _is_open_port(self, address: IPAddress) -> bool:
        outcome = probe_port(address, self.config.port, self.config.timeout)
        if outcome is ProbeOutcome.ERROR:
            logger.info("Treating %s port %d as offline after a connection error", address, self.config.port)
        return outcome is ProbeOutcome.OPEN

    def _combine(self, results: Iterable[bool]) -> bool:
        if self.config.strategy is CheckStrategy.ALL:
            return all(results)
        return any(results)

    def is_online(self, host: Host) -> bool:
        """Returns True if the host counts as online under the configured family and strategy."""
        addresses = host.filter_addresses(self.config.family)
        if not addresses:
            return False
        results = [is_open for _addr, is_open in self.pool.map_unordered(self._is_open_port, addresses)]
        return self._combine(results)

    def _probe_pair(self, pair: Tuple[Host, IPAddress]) -> bool:
        return self._is_open_port(pair[1])

    def collect_online(self, hosts: Iterable[Host]) -> Set[Host]:
        """
        Returns the subset of `hosts` that is online. Every address of every
        host is probed in one parallel batch; results are then grouped per host.
        """
        pairs: List[Tuple[Host, IPAddress]] = []
        candidates: List[Host] = []
        for host in dict.fromkeys(hosts):
            addresses = host.filter_addresses(self.config.family)
            if not addresses:
                logger.debug("%s has no %s addresses", host, self.config.family.value)
                continue
            candidates.append(host)
            pairs.extend((host, address) for address in addresses)

        per_host: Dict[Host, List[bool]] = defaultdict(list)
        for (host, _address), is_open in self.pool.map_unordered(self._probe_pair, pairs):
            per_host[host].append(is_open)

        online = {host for host in candidates if self._combine(per_host[host])}
        logger.debug("%d of %d hosts online on port %d", len(online), len(candidates), self.config.port)
        return online
