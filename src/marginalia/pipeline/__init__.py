"""Note pipeline module for Marginalia.

Provides the pipeline that creates notes and the fan-out that forwards
them to chat and the AI service.
"""

from .fanout import FanoutCoordinator, chat_text
from .note_pipeline import NotePipeline

__all__ = ["FanoutCoordinator", "NotePipeline", "chat_text"]
