"""Exceptions raised by the copilot's request pipeline."""

from typing import Optional


class CopilotError(Exception):
    """Base class for copilot errors."""


class TransportError(CopilotError):
    """
    The relay or the local provider process could not be reached, or failed.

    Terminates the active stream. Never retried automatically.
    """


class DecodeError(CopilotError):
    """
    A chunk (or the final remainder of a stream) was not valid JSON.

    Attributes:
        message: Error description
        snippet: The text that failed to decode, truncated
    """

    def __init__(self, message: str, snippet: Optional[str] = None):
        self.message = message
        self.snippet = snippet

        parts = [message]
        if snippet:
            # Truncate snippet if too long
            shown = snippet[:200] + "..." if len(snippet) > 200 else snippet
            parts.append(f"\nReceived:\n{shown}")

        super().__init__("\n".join(parts))


class ValidationRejection(CopilotError):
    """
    A submission was refused before any I/O happened.

    Attributes:
        reason: Short machine-readable reason ("empty_question", "stream_in_flight", ...)
    """

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message)
