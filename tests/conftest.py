"""
Shared pytest fixtures for retrysim tests.
"""

import logging
import math

import pytest

from retrysim import (
    ClientConfig,
    Constant,
    ConstantBackoff,
    Network,
    NetworkConfig,
    Server,
    ServerConfig,
    Simulation,
)


@pytest.fixture(autouse=True)
def reset_retrysim_logging():
    """Reset logging state before each test.

    Ensures tests start with a clean logging configuration:
    - Removes all handlers except NullHandler
    - Resets level to NOTSET (inherit from parent)
    """
    logger = logging.getLogger("retrysim")

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        if not isinstance(handler, logging.NullHandler):
            handler.close()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)

    yield

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        if not isinstance(handler, logging.NullHandler):
            handler.close()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def sim() -> Simulation:
    return Simulation(seed=1234)


@pytest.fixture
def fixed_network(sim) -> Network:
    """Network with a constant 10ms latency and no drops."""
    return Network(sim, NetworkConfig(latency=Constant(10)))


@pytest.fixture
def reliable_server(sim, fixed_network) -> Server:
    """Unbounded server, 50ms per request, never fails."""
    return Server(
        sim,
        fixed_network,
        ServerConfig(proc_time=Constant(50), queue_bound=math.inf, failure_probability=0.0),
        name="reliable",
    )


@pytest.fixture
def fast_retry_config() -> ClientConfig:
    """Short timeout and constant 10ms backoff so retry chains stay small."""
    return ClientConfig(
        interval=Constant(1000),
        backoff=ConstantBackoff(10),
        timeout_ms=100,
        max_retries=2,
    )
