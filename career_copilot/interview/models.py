"""
Data models for the interview copilot.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class SuggestedAnswer:
    """Structured suggestion for one interview question."""
    answer: str = ""
    key_points: List[str] = field(default_factory=list)
    pro_tip: str = ""

    def copy(self) -> "SuggestedAnswer":
        return SuggestedAnswer(self.answer, list(self.key_points), self.pro_tip)


@dataclass
class InterviewTurn:
    """One question/answer exchange."""
    id: str
    question: str
    suggestion: SuggestedAnswer = field(default_factory=SuggestedAnswer)
    timestamp: str = ""

    @classmethod
    def create(cls, question: str, now: Optional[datetime] = None) -> "InterviewTurn":
        """New turn with an empty suggestion."""
        return cls(
            id=f"turn-{uuid.uuid4().hex}",
            question=question,
            suggestion=SuggestedAnswer(),
            timestamp=(now or datetime.now()).strftime("%H:%M:%S"),
        )

    def matches(self, question: str) -> bool:
        """Case-insensitive exact question match."""
        return self.question.lower() == question.lower()


@dataclass
class StreamSession:
    """State bound to the one in-flight turn."""
    turn_id: str
    token: int
    cancelled: bool = False
    chunks_seen: int = 0
