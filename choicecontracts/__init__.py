"""Swap router and burn-auction forwarder contract logic, with in-memory state."""

__version__ = "0.1.0"
__all__ = ["errors", "types", "auction", "operations", "router"]