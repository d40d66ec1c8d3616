"""Telemetry and observability helpers.

This package emits run and job events for deterministic auditing.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
