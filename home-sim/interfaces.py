"""
Abstract interfaces following Interface Segregation Principle (ISP) and
Dependency Inversion Principle (DIP).
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class CommandMapper(ABC):
    """Maps free text to a structured command message (or None)."""

    @abstractmethod
    def map(self, text: str) -> Optional[Dict[str, Any]]:
        """Return a {'type': ..., 'value': ...} message, or None if not understood."""
        pass


class CommandSource(ABC):
    """Produces a structured Command from raw observer input."""

    @abstractmethod
    def produce(self, raw: Any):
        """Return a Command; raise CommandParseError on malformed input."""
        pass


class SimulationEngine(ABC):
    """Interface the broadcast layer needs from the simulation."""

    @abstractmethod
    def tick(self, dt: float = None):
        """Advance one tick and return the resulting snapshot."""
        pass

    @abstractmethod
    def handle_command(self, command) -> bool:
        """Apply a command; True if it changed the state."""
        pass

    @abstractmethod
    def snapshot(self):
        """Return a snapshot of the current state."""
        pass


class ProtocolServer(ABC):
    """
    Abstract base class for servers started alongside the simulation (SRP + OCP).
    """

    @abstractmethod
    def start(self) -> None:
        """Start the server."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the server."""
        pass
