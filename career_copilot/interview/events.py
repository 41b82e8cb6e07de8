"""
Event-driven notifications from the interview copilot.
"""
import logging
from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of copilot events."""
    TURN_STARTED = "turn_started"
    SUGGESTION_UPDATED = "suggestion_updated"
    TURN_COMPLETED = "turn_completed"
    TURN_FAILED = "turn_failed"
    TURN_DISCARDED = "turn_discarded"
    SUBMISSION_REJECTED = "submission_rejected"
    SESSION_RESET = "session_reset"


@dataclass
class CopilotEvent:
    """Base class for all copilot events."""
    event_type: EventType
    turn_id: Optional[str]
    timestamp: float
    data: Dict[str, Any]


@dataclass
class TurnStartedEvent(CopilotEvent):
    """Event fired when a turn starts streaming."""
    def __init__(self, turn_id: str, timestamp: float, question: str, regenerated: bool):
        super().__init__(
            event_type=EventType.TURN_STARTED,
            turn_id=turn_id,
            timestamp=timestamp,
            data={"question": question, "regenerated": regenerated}
        )


@dataclass
class SuggestionUpdatedEvent(CopilotEvent):
    """Event fired after every processed chunk. `answer` is the full current text."""
    def __init__(self, turn_id: str, timestamp: float, answer: str, chunk_index: int):
        super().__init__(
            event_type=EventType.SUGGESTION_UPDATED,
            turn_id=turn_id,
            timestamp=timestamp,
            data={"answer": answer, "chunk_index": chunk_index}
        )


@dataclass
class TurnCompletedEvent(CopilotEvent):
    """Event fired when a turn's stream ends and the suggestion is final."""
    def __init__(self, turn_id: str, timestamp: float, answer: str,
                 key_points: List[str], pro_tip: str, missing_blocks: List[str]):
        super().__init__(
            event_type=EventType.TURN_COMPLETED,
            turn_id=turn_id,
            timestamp=timestamp,
            data={
                "answer": answer,
                "key_points": list(key_points),
                "pro_tip": pro_tip,
                "missing_blocks": list(missing_blocks)
            }
        )


@dataclass
class TurnFailedEvent(CopilotEvent):
    """Event fired when a turn's stream fails."""
    def __init__(self, turn_id: str, timestamp: float, error_type: str, error_message: str):
        super().__init__(
            event_type=EventType.TURN_FAILED,
            turn_id=turn_id,
            timestamp=timestamp,
            data={"error_type": error_type, "error_message": error_message}
        )


@dataclass
class TurnDiscardedEvent(CopilotEvent):
    """Event fired when a superseded session's result is dropped."""
    def __init__(self, turn_id: str, timestamp: float, chunks_seen: int):
        super().__init__(
            event_type=EventType.TURN_DISCARDED,
            turn_id=turn_id,
            timestamp=timestamp,
            data={"chunks_seen": chunks_seen}
        )


@dataclass
class SubmissionRejectedEvent(CopilotEvent):
    """Event fired when a question or regenerate request is refused."""
    def __init__(self, timestamp: float, reason: str, message: str):
        super().__init__(
            event_type=EventType.SUBMISSION_REJECTED,
            turn_id=None,
            timestamp=timestamp,
            data={"reason": reason, "message": message}
        )


@dataclass
class SessionResetEvent(CopilotEvent):
    """Event fired when the interview session is reset."""
    def __init__(self, timestamp: float, cleared_turns: int, cancelled_turn_id: Optional[str]):
        super().__init__(
            event_type=EventType.SESSION_RESET,
            turn_id=cancelled_turn_id,
            timestamp=timestamp,
            data={"cleared_turns": cleared_turns}
        )


EventHandler = Callable[[CopilotEvent], None]


class CopilotEventBus:
    """Event bus between the copilot and whatever renders it."""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to all events."""
        self._global_handlers.append(handler)
        logger.debug("Subscribed global handler")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe from specific event type."""
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {event_type}")
            except ValueError:
                logger.warning(f"Handler not found for {event_type}")

    def emit(self, event: CopilotEvent) -> None:
        """
        Emit an event to all subscribers.

        Handlers run synchronously, in subscription order. A failing handler
        is logged and does not stop the others.
        """
        logger.debug(f"Emitting event: {event.event_type} for turn {event.turn_id}")

        # Copy so handlers may (un)subscribe while we iterate
        for handler in list(self._handlers.get(event.event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}")

        for handler in list(self._global_handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")

    def clear_handlers(self) -> None:
        """Clear all event handlers."""
        self._handlers.clear()
        self._global_handlers.clear()
        logger.debug("Cleared all event handlers")


class EventLogger:
    """Logs all events for debugging and analysis."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.log_level = log_level

    def handle_event(self, event: CopilotEvent) -> None:
        """Log event details. Per-chunk updates go to DEBUG."""
        level = logging.DEBUG if event.event_type == EventType.SUGGESTION_UPDATED else self.log_level
        self.logger.log(level, f"Event: {event.event_type.value} | Turn: {event.turn_id} | Data: {event.data}")


class CopilotMetrics:
    """Collects metrics from copilot events."""

    def __init__(self):
        self.reset()

    def handle_event(self, event: CopilotEvent) -> None:
        """Update metrics based on event."""
        if event.event_type == EventType.TURN_STARTED:
            self.turns_started += 1
        elif event.event_type == EventType.SUGGESTION_UPDATED:
            self.chunks_processed += 1
        elif event.event_type == EventType.TURN_COMPLETED:
            self.turns_completed += 1
            if event.data.get("missing_blocks"):
                self.degraded_turns += 1
        elif event.event_type == EventType.TURN_FAILED:
            self.turns_failed += 1
        elif event.event_type == EventType.TURN_DISCARDED:
            self.turns_discarded += 1
        elif event.event_type == EventType.SUBMISSION_REJECTED:
            self.submissions_rejected += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        return {
            "turns_started": self.turns_started,
            "turns_completed": self.turns_completed,
            "turns_failed": self.turns_failed,
            "turns_discarded": self.turns_discarded,
            "degraded_turns": self.degraded_turns,
            "chunks_processed": self.chunks_processed,
            "submissions_rejected": self.submissions_rejected
        }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self.turns_started = 0
        self.turns_completed = 0
        self.turns_failed = 0
        self.turns_discarded = 0
        self.degraded_turns = 0
        self.chunks_processed = 0
        self.submissions_rejected = 0
