"""Network simulation for the mock service layer."""

from app.adapters.simulation.network import NetworkSimulator, create_network_simulator

__all__ = [
    "NetworkSimulator",
    "create_network_simulator",
]
