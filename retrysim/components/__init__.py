"""Actors of the simulation: network, servers, requests and clients."""

from retrysim.components.client import Client
from retrysim.components.network import Network
from retrysim.components.request import Request, RequestState
from retrysim.components.server import Server

__all__ = [
    "Client",
    "Network",
    "Request",
    "RequestState",
    "Server",
]
