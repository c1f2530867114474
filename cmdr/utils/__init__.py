"""Caller-side helpers layered on the runner."""

from cmdr.utils.deadline import kill, run_with_deadline, terminate

__all__ = ["kill", "run_with_deadline", "terminate"]
