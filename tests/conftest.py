"""Shared fixtures for isonline tests."""

import socket
from typing import Iterator

import pytest

from isonline.network import pool as pool_module
from isonline.network.pool import WorkerPool


@pytest.fixture
def pool() -> Iterator[WorkerPool]:
    """A small private worker pool."""
    with WorkerPool(4) as p:
        yield p


@pytest.fixture
def reset_global_pool(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Lets a test configure the process-wide pool from scratch."""
    monkeypatch.setattr(pool_module, "_global_pool", None)
    yield
    if pool_module._global_pool is not None:
        pool_module._global_pool.shutdown(wait=False)


@pytest.fixture
def open_port() -> Iterator[int]:
    """A port on 127.0.0.1 that accepts connections."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind(("127.0.0.1", 0))
    server.listen(64)
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


@pytest.fixture
def refused_port() -> Iterator[int]:
    """A port on 127.0.0.1 that is bound but not listening, so connections are refused."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()
