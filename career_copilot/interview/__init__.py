"""Interview copilot components.

This module contains the streaming pipeline behind the live interview coach:
prompt building, suggestion extraction, the turn controller and its events.
"""

# Turn controller
from .controller import InterviewCopilot, ControllerState

# Data models
from .models import SuggestedAnswer, InterviewTurn, StreamSession

# Prompt building
from .prompts import InterviewPrompts, build_answer_request, format_history

# Extraction
from .extraction import (
    SuggestionExtractor, ExtractionState, extract_suggestion,
    extract_partial_answer, split_key_points, find_block
)

# Event system
from .events import (
    CopilotEventBus, EventLogger, CopilotMetrics,
    EventType, CopilotEvent, TurnStartedEvent, SuggestionUpdatedEvent,
    TurnCompletedEvent, TurnFailedEvent, TurnDiscardedEvent,
    SubmissionRejectedEvent, SessionResetEvent
)

__all__ = [
    # Controller
    "InterviewCopilot", "ControllerState",

    # Data models
    "SuggestedAnswer", "InterviewTurn", "StreamSession",

    # Prompts
    "InterviewPrompts", "build_answer_request", "format_history",

    # Extraction
    "SuggestionExtractor", "ExtractionState", "extract_suggestion",
    "extract_partial_answer", "split_key_points", "find_block",

    # Events
    "CopilotEventBus", "EventLogger", "CopilotMetrics",
    "EventType", "CopilotEvent", "TurnStartedEvent", "SuggestionUpdatedEvent",
    "TurnCompletedEvent", "TurnFailedEvent", "TurnDiscardedEvent",
    "SubmissionRejectedEvent", "SessionResetEvent"
]
