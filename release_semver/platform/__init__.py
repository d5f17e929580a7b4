"""Operating system boundary: subprocess execution and tool lookup."""

from .process import ProcessError, run, which

__all__ = ["ProcessError", "run", "which"]
