"""Connectivity detection for the sync agent."""

from infrastructure.connectivity.link_state import PsutilLinkState, StaticLinkState
from infrastructure.connectivity.monitor import ConnectivityMonitor

__all__ = ["ConnectivityMonitor", "PsutilLinkState", "StaticLinkState"]
