"""Runtime services shared by the content layer."""

from . import telemetry

__all__ = ["telemetry"]
