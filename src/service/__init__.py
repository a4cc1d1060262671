"""
Service package provides the remote side public APIs: host discovery and the target session.
"""

from .discovery import HostDiscovery
from .session import SessionManager

__all__ = ["HostDiscovery", "SessionManager"]
