import logging

# Library default: silent until the application opts in via logging_config
logging.getLogger("retrysim").addHandler(logging.NullHandler())

# Re-exports for concise imports
from .config import ClientConfig, NetworkConfig, ServerConfig
from .core import Event, EventHeap, Simulation
from .components import Client, Network, Request, RequestState, Server
from .distributions import (
    BACKOFFS,
    BackoffPolicy,
    Constant,
    ConstantBackoff,
    Distribution,
    Exponential,
    ExponentialBackoff,
    JitteredBackoff,
    LinearBackoff,
    Normal,
    QuadraticBackoff,
    Uniform,
    backoff_from_name,
    minutes,
    seconds,
)
from .instrumentation import (
    Analyzer,
    Recorder,
    Series,
    SimulationSummary,
    StatSample,
    Timeslice,
    build_series,
    series_frame,
)
from .logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from .scenario import Scenario, ScenarioConfig, ScenarioResult, run_scenario

__all__ = [
    # Config
    "ClientConfig",
    "NetworkConfig",
    "ServerConfig",
    # Core
    "Event",
    "EventHeap",
    "Simulation",
    # Actors
    "Client",
    "Network",
    "Request",
    "RequestState",
    "Server",
    # Distributions
    "BACKOFFS",
    "BackoffPolicy",
    "Constant",
    "ConstantBackoff",
    "Distribution",
    "Exponential",
    "ExponentialBackoff",
    "JitteredBackoff",
    "LinearBackoff",
    "Normal",
    "QuadraticBackoff",
    "Uniform",
    "backoff_from_name",
    "minutes",
    "seconds",
    # Instrumentation
    "Analyzer",
    "Recorder",
    "Series",
    "SimulationSummary",
    "StatSample",
    "Timeslice",
    "build_series",
    "series_frame",
    # Logging
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
    # Scenario
    "Scenario",
    "ScenarioConfig",
    "ScenarioResult",
    "run_scenario",
]
