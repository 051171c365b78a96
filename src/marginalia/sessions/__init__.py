"""Reading sessions module for Marginalia.

Provides the ReadingSession model, statistics helpers and the orchestrator
that keeps a single session active at a time.
"""

from .models import ReadingSession
from .orchestrator import SessionOrchestrator, StartResult

__all__ = ["ReadingSession", "SessionOrchestrator", "StartResult"]
