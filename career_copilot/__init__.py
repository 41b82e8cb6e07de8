"""
Career Copilot: AI-assisted resume, job-search and live interview coaching.

All generation is delegated to a hosted Gemini model, reached either through
an HTTP relay that streams newline-delimited JSON or through a local process
that returns one full response.
"""

__version__ = "1.0.0"

# Main entry points
from .interview.controller import InterviewCopilot
from .interview.models import InterviewTurn, SuggestedAnswer
from .career.services import CareerAssistant
from .infrastructure.transport import create_transport

__all__ = ["InterviewCopilot", "InterviewTurn", "SuggestedAnswer", "CareerAssistant", "create_transport"]
