"""
Interview copilot turn controller.

Binds each interview question to one streaming extraction session and
publishes progress through the event bus.
"""
import itertools
import logging
import os
import time
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence

from ..career.schemas import ResumeData
from ..config import MODEL_NAME, ANSWER_TEMPERATURE
from ..exceptions import DecodeError, TransportError, ValidationRejection
from ..infrastructure.transport import ChatTransport
from .events import (
    CopilotEventBus, CopilotEvent, TurnStartedEvent, SuggestionUpdatedEvent,
    TurnCompletedEvent, TurnFailedEvent, TurnDiscardedEvent,
    SubmissionRejectedEvent, SessionResetEvent
)
from .extraction import ExtractionState, SuggestionExtractor
from .models import InterviewTurn, StreamSession
from .prompts import build_answer_request

logger = logging.getLogger("controller")


class ControllerState(str, Enum):
    """Whether a stream is in flight."""
    IDLE = "idle"
    STREAMING = "streaming"


class InterviewCopilot:
    """
    Live interview coach: one streamed suggestion per question.

    At most one stream is in flight. Submissions made while streaming are
    rejected, not queued. Event handlers run inside the stream loop and may
    call back into the controller (e.g. reset_session); a superseded
    session's result is dropped, never applied.
    """

    def __init__(self,
                 transport: ChatTransport,
                 resume: Optional[ResumeData] = None,
                 job_description: str = "",
                 job_role: str = "",
                 event_bus: Optional[CopilotEventBus] = None,
                 model: str = MODEL_NAME,
                 temperature: float = ANSWER_TEMPERATURE):
        self.transport = transport
        self.resume = resume or ResumeData()
        self.job_description = job_description
        self.job_role = job_role
        self.event_bus = event_bus or CopilotEventBus()
        self.model = model
        self.temperature = temperature

        self.state = ControllerState.IDLE
        self._turns: List[InterviewTurn] = []
        self._session: Optional[StreamSession] = None
        self._tokens = itertools.count(1)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def turns(self) -> List[InterviewTurn]:
        """Turns, newest first."""
        return list(self._turns)

    @property
    def latest_turn(self) -> Optional[InterviewTurn]:
        return self._turns[0] if self._turns else None

    @property
    def is_streaming(self) -> bool:
        return self.state is ControllerState.STREAMING

    # ------------------------------------------------------------------
    # Session setup
    # ------------------------------------------------------------------

    def start_session(self, job_role: str, job_description: str = "") -> None:
        """
        Set the role being interviewed for.

        Raises:
            ValidationRejection: If job_role is empty
        """
        if not job_role or not job_role.strip():
            raise ValidationRejection("missing_job_role", "Please provide a Job Role to start.")
        self.job_role = job_role.strip()
        self.job_description = job_description.strip()
        logger.info("Interview session started for role: %s", self.job_role)

    def reset_session(self) -> None:
        """Cancel any in-flight stream and clear the turn list."""
        cancelled = self._session
        if cancelled is not None:
            cancelled.cancelled = True
            logger.info("Cancelling in-flight stream for %s", cancelled.turn_id)
        self._session = None
        self.state = ControllerState.IDLE

        cleared = len(self._turns)
        self._turns = []
        self._emit(SessionResetEvent(time.time(), cleared, cancelled.turn_id if cancelled else None))

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def analyze_question(self, question: str) -> Optional[InterviewTurn]:
        """
        Stream a suggested answer for a new question.

        A prior turn with the same question (case-insensitive) is replaced.

        Returns:
            The new turn once its stream has ended, or None if rejected
        """
        try:
            question = self._accept_submission(question)
        except ValidationRejection as rejection:
            self._reject(rejection)
            return None

        history = [turn for turn in self._turns if not turn.matches(question)]
        turn = InterviewTurn.create(question)
        self._turns = [turn] + history

        self._run_session(turn, history, regenerated=False)
        return turn

    def regenerate_latest(self) -> Optional[InterviewTurn]:
        """
        Replace the newest turn with a fresh one for the same question.

        Returns:
            The new turn once its stream has ended, or None if rejected
        """
        try:
            if not self._turns:
                raise ValidationRejection("no_turns", "Nothing to regenerate yet.")
            self._accept_submission(self._turns[0].question)
        except ValidationRejection as rejection:
            self._reject(rejection)
            return None

        turn = InterviewTurn.create(self._turns[0].question)
        self._turns[0] = turn

        self._run_session(turn, self._turns[1:], regenerated=True)
        return turn

    def _accept_submission(self, question: Optional[str]) -> str:
        question = (question or "").strip()
        if not question:
            raise ValidationRejection("empty_question", "Question is empty.")
        if self.is_streaming:
            raise ValidationRejection("stream_in_flight", "An answer is still streaming.")
        return question

    def _reject(self, rejection: ValidationRejection) -> None:
        logger.info("Submission rejected (%s): %s", rejection.reason, rejection)
        self._emit(SubmissionRejectedEvent(time.time(), rejection.reason, str(rejection)))

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def _is_stale(self, session: StreamSession) -> bool:
        return session.cancelled or self._session is not session

    def _run_session(self, turn: InterviewTurn, history: Sequence[InterviewTurn], regenerated: bool) -> None:
        session = StreamSession(turn_id=turn.id, token=next(self._tokens))
        self._session = session
        self.state = ControllerState.STREAMING
        logger.info("Streaming turn %s (session %d): %s", turn.id, session.token, turn.question)
        self._emit(TurnStartedEvent(turn.id, time.time(), turn.question, regenerated))

        extractor = SuggestionExtractor()
        chunks = None
        try:
            request = build_answer_request(
                self.resume, self.job_description, turn.question, history,
                model=self.model, temperature=self.temperature,
            )
            chunks = self.transport.stream(request)
            for chunk in chunks:
                if self._is_stale(session):
                    break
                session.chunks_seen += 1
                extractor.feed(chunk)
                turn.suggestion.answer = extractor.suggestion.answer
                self._emit(SuggestionUpdatedEvent(turn.id, time.time(), turn.suggestion.answer,
                                                  session.chunks_seen))
        except (TransportError, DecodeError) as e:
            if not self._is_stale(session):
                extractor.fail(e)
        except Exception as e:
            # Unexpected failure: the turn still ends FAILED, then the error propagates
            if not self._is_stale(session):
                extractor.fail(e)
                self._finalize(turn, extractor)
            raise
        finally:
            close = getattr(chunks, "close", None)
            if close is not None:
                close()
            if self._session is session:
                self._session = None
                self.state = ControllerState.IDLE

        if self._is_stale(session):
            logger.info("Discarding superseded result for %s after %d chunk(s)",
                        turn.id, session.chunks_seen)
            self._emit(TurnDiscardedEvent(turn.id, time.time(), session.chunks_seen))
            return

        if not extractor.is_terminal:
            extractor.finish()
        self._finalize(turn, extractor)

    def _finalize(self, turn: InterviewTurn, extractor: SuggestionExtractor) -> None:
        turn.suggestion = extractor.suggestion.copy()
        if extractor.state is ExtractionState.FAILED:
            error = extractor.error
            self._emit(TurnFailedEvent(turn.id, time.time(), type(error).__name__, str(error)))
        else:
            self._emit(TurnCompletedEvent(
                turn.id, time.time(), turn.suggestion.answer, turn.suggestion.key_points,
                turn.suggestion.pro_tip, extractor.degradations,
            ))

    def _emit(self, event: CopilotEvent) -> None:
        self.event_bus.emit(event)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_log(self, now: Optional[datetime] = None) -> str:
        """Plain-text session log, oldest turn first."""
        now = now or datetime.now()
        lines = [f"Interview Copilot Log for {self.job_role}", f"Date: {now:%Y-%m-%d %H:%M:%S}", ""]
        for turn in reversed(self._turns):
            lines.append("-" * 50)
            lines.append(f"[{turn.timestamp}] Question:")
            lines.append(turn.question)
            lines.append("")
            lines.append("AI Suggested Answer:")
            lines.append(turn.suggestion.answer)
            lines.append("")
            lines.append("Key Points:")
            lines.extend(f"- {point}" for point in turn.suggestion.key_points)
            lines.append("")
            lines.append(f"Pro-Tip: {turn.suggestion.pro_tip}")
            lines.append("")
        return "\n".join(lines) + "\n"

    def default_log_filename(self) -> str:
        role = "_".join((self.job_role or "session").split())
        return f"interview-log-{role}.txt"

    def save_log(self, path: Optional[str] = None) -> str:
        """Write export_log() to path (default: interview-log-<role>.txt). Returns the path."""
        path = path or self.default_log_filename()
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.export_log())
        logger.info("Saved interview log to %s", path)
        return path
