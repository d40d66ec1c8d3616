"""Scriptvoice pipeline package.

This package contains the continuity-aware sequencer, the batch job store and
orchestrator, and the service facade that wires them to configuration.
"""

from .jobs import JobStore
from .orchestrator import BatchOrchestrator, BatchSummary
from .sequencer import SequenceRun, VoiceoverSequencer
from .service import SingleRunResult, VoiceoverService

__all__ = [
    "BatchOrchestrator",
    "BatchSummary",
    "JobStore",
    "SequenceRun",
    "SingleRunResult",
    "VoiceoverSequencer",
    "VoiceoverService",
]
