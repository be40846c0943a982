"""
Command-line driver for isonline.

Expands the targets once, then runs rounds of resolve-then-probe and prints
one line per target. With --wait, rounds repeat every second until every
target is online.
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set

from termcolor import colored

from . import configuration
from .checker import TcpPortCheck
from .errors import ConfigurationError
from .models import AddressFamily, CheckConfig, CheckStrategy
from .network import configure_pool, expand_subnets, resolve_hosts
from .network.pool import WorkerPool
from .parsing import read_targets

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
WAIT_INTERVAL_SECONDS = 1.0
CLEAR_SCREEN = "\x1b[2J\x1b[1;1H"

EXIT_OK = 0
EXIT_OFFLINE = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


@dataclass
class RoundResult:
    """Names that resolved and names that were online in one round."""
    resolved: Set[str] = field(default_factory=set)
    online: Set[str] = field(default_factory=set)

    def all_online(self, targets: Sequence[str]) -> bool:
        return all(name in self.online for name in targets)

    def exit_code(self, targets: Sequence[str], fail: bool) -> int:
        if fail and not self.all_online(targets):
            return EXIT_OFFLINE
        return EXIT_OK


def run_round(targets: Sequence[str], check: TcpPortCheck, pool: Optional[WorkerPool] = None) -> RoundResult:
    """Resolves and probes every target once."""
    hosts = resolve_hosts(targets, pool=pool)
    online = check.collect_online(hosts)
    result = RoundResult(
        resolved={h.name for h in hosts},
        online={h.name for h in online},
    )
    logging.info(
        "Round complete: %d targets, %d resolved, %d online",
        len(targets), len(result.resolved), len(result.online),
    )
    return result


def format_report(targets: Sequence[str], result: RoundResult, port: int, color: bool = True) -> Iterator[str]:
    """Yields one status line per target, in input order."""
    online_text = colored("online", "green", attrs=["bold"]) if color else "online"
    offline_text = colored("offline", "red", attrs=["bold"]) if color else "offline"
    for name in targets:
        if name not in result.resolved:
            yield f"{name} could not be resolved"
        elif name not in result.online:
            yield f"{name}:{port} is {offline_text}"
        else:
            yield f"{name}:{port} is {online_text}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="isonline",
        description="Check if a port on one or many hosts is online.",
    )
    parser.add_argument("hosts", nargs="*",
                        help="Hosts, IP addresses or CIDR subnets to check (read from stdin if omitted)")
    parser.add_argument("-p", "--port", type=int, help="Port to check (default: 22)")
    parser.add_argument("-t", "--timeout", type=int, help="TCP connection timeout in milliseconds (default: 1000)")
    parser.add_argument("-4", dest="ipv4_only", action="store_true", help="Limit to IPv4")
    parser.add_argument("-6", dest="ipv6_only", action="store_true", help="Limit to IPv6")
    parser.add_argument("-f", "--fail", action="store_true", help="Exit with 1 if any of the hosts are offline")
    parser.add_argument("-q", "--quiet", action="store_true", help="Do not print anything")
    parser.add_argument("--no-color", action="store_true", help="Do not print colors")
    parser.add_argument("--all", action="store_true",
                        help="Require all addresses of a host to be online (by default, one is enough)")
    parser.add_argument("-w", "--wait", action="store_true", help="Wait for the hosts to be online, then exit")
    parser.add_argument("-c", "--clear", action="store_true",
                        help="Clear screen before showing results (useful when waiting)")
    parser.add_argument("--workers", type=int,
                        help="Number of threads used for I/O. 0 uses the number of CPUs multiplied by 4.")
    parser.add_argument("--config", help="Path to a YAML configuration file (default: isonline.yaml)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log more (repeat for debug output)")
    return parser


def merge_args(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Applies command-line flags on top of the file configuration."""
    merged = dict(config)
    if args.port is not None:
        merged['port'] = args.port
    if args.timeout is not None:
        merged['timeout_ms'] = args.timeout
    if args.ipv4_only != args.ipv6_only:
        merged['family'] = AddressFamily.V4.value if args.ipv4_only else AddressFamily.V6.value
    elif args.ipv4_only:
        merged['family'] = AddressFamily.BOTH.value
    if args.all:
        merged['strategy'] = CheckStrategy.ALL.value
    if args.workers is not None:
        merged['workers'] = args.workers
    if args.no_color or 'NO_COLOR' in os.environ:
        merged['color'] = False
    if args.verbose == 1:
        merged['log_level'] = 'INFO'
    elif args.verbose > 1:
        merged['log_level'] = 'DEBUG'
    return merged


def setup_logging(level: str):
    level_str = str(level or 'WARNING').strip().upper()
    log_level = getattr(logging, level_str, None)
    if not isinstance(log_level, int):
        raise ConfigurationError(f"Unknown log level '{level}'.")
    logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stderr)


def run(targets: List[str], check: CheckConfig, args: argparse.Namespace, color: bool,
        pool: Optional[WorkerPool] = None) -> int:
    """The polling loop. Returns the process exit code."""
    tcp_check = TcpPortCheck(check, pool=pool)
    while True:
        if args.clear:
            print(CLEAR_SCREEN, end="")

        result = run_round(targets, tcp_check, pool=pool)

        if not args.quiet:
            for line in format_report(targets, result, check.port, color=color):
                print(line)
            sys.stdout.flush()

        if not args.wait or result.all_online(targets):
            return result.exit_code(targets, args.fail)
        time.sleep(WAIT_INTERVAL_SECONDS)


def main(argv: Optional[List[str]] = None) -> int:
    """The main entry point for the command-line tool."""
    args = build_parser().parse_args(argv)

    try:
        config = merge_args(configuration.load_config(args.config), args)
        setup_logging(config['log_level'])
        check = configuration.build_check_config(config)
        pool = configure_pool(config['workers'])
    except ConfigurationError as e:
        logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr)
        logging.critical("%s", e)
        return EXIT_CONFIG_ERROR

    targets = expand_subnets(read_targets(args.hosts, sys.stdin))
    logging.info("Checking port %d on %d targets", check.port, len(targets))

    try:
        return run(targets, check, args, color=bool(config['color']), pool=pool)
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    finally:
        pool.shutdown(wait=False)
