"""
Extraction of structured suggestions from the model's tagged free text.

The model is asked for <ANSWER>, <KEYPOINTS> and <PROTIP> blocks, but nothing
enforces it. Parsing is best effort with fixed fallbacks:

- no closed <ANSWER> block      -> FALLBACK_ANSWER
- no closed <KEYPOINTS> block   -> []
- no closed <PROTIP> block      -> ""
- transport / decode failure    -> ERROR_ANSWER
"""
import logging
import re
from enum import Enum
from typing import Callable, Iterable, List, Optional

from ..config import FALLBACK_ANSWER, ERROR_ANSWER
from ..exceptions import DecodeError, TransportError
from ..infrastructure.transport.base import RawChunk
from .models import SuggestedAnswer
from .prompts import ANSWER_TAG, KEYPOINTS_TAG, PROTIP_TAG

logger = logging.getLogger("extraction")

_BLOCK_PATTERNS = {
    tag: re.compile(rf"<{tag}>(.*?)</{tag}>", re.DOTALL)
    for tag in (ANSWER_TAG, KEYPOINTS_TAG, PROTIP_TAG)
}
_BULLET = re.compile(r"^[ \t]*-\s+", re.MULTILINE)


def find_block(text: str, tag: str) -> Optional[str]:
    """Trimmed inner text of the first closed <tag>...</tag> block, or None."""
    match = _BLOCK_PATTERNS[tag].search(text)
    return match.group(1).strip() if match else None


def _strip_partial_closing_tag(text: str, closing: str) -> str:
    # "Hello</ANS" -> "Hello" while the closing tag is still arriving
    for size in range(len(closing) - 1, 0, -1):
        if text.endswith(closing[:size]):
            return text[:-size]
    return text


def extract_partial_answer(text: str) -> str:
    """
    Best-effort answer while the stream is still running.

    A closed block gives its inner text; an open block gives what follows the
    opening tag so far. Before the opening tag arrives there is no answer.
    """
    closed = find_block(text, ANSWER_TAG)
    if closed is not None:
        return closed

    opening = f"<{ANSWER_TAG}>"
    start = text.find(opening)
    if start == -1:
        return ""
    partial = text[start + len(opening):]
    return _strip_partial_closing_tag(partial, f"</{ANSWER_TAG}>").strip()


def split_key_points(block: str) -> List[str]:
    """Split a key-points block on line-leading "- " bullets, dropping empties."""
    return [point.strip() for point in _BULLET.split(block) if point.strip()]


def missing_blocks(text: str) -> List[str]:
    """Names of the tagged blocks that are absent (or unclosed) in text."""
    return [tag for tag in (ANSWER_TAG, KEYPOINTS_TAG, PROTIP_TAG) if find_block(text, tag) is None]


def extract_suggestion(text: str) -> SuggestedAnswer:
    """Final extraction over the complete text. Pure: same text, same result."""
    answer = find_block(text, ANSWER_TAG)
    key_points = find_block(text, KEYPOINTS_TAG)
    pro_tip = find_block(text, PROTIP_TAG)

    return SuggestedAnswer(
        answer=answer if answer is not None else FALLBACK_ANSWER,
        key_points=split_key_points(key_points) if key_points is not None else [],
        pro_tip=pro_tip if pro_tip is not None else "",
    )


class ExtractionState(str, Enum):
    """Lifecycle of one extraction."""
    ACCUMULATING = "accumulating"
    COMPLETE = "complete"
    FAILED = "failed"


class SuggestionExtractor:
    """
    Accumulates streamed fragments and extracts a SuggestedAnswer.

    ACCUMULATING --finish()--> COMPLETE
    ACCUMULATING --fail()----> FAILED

    Fragments are concatenated here; callers one layer up replace their
    visible answer with `suggestion.answer` on every update.
    """

    def __init__(self):
        self._parts: List[str] = []
        self.state = ExtractionState.ACCUMULATING
        self.suggestion = SuggestedAnswer()
        self.degradations: List[str] = []
        self.error: Optional[Exception] = None

    @property
    def text(self) -> str:
        """Everything received so far."""
        return "".join(self._parts)

    @property
    def is_terminal(self) -> bool:
        return self.state is not ExtractionState.ACCUMULATING

    def _require_accumulating(self, action: str):
        if self.is_terminal:
            raise RuntimeError(f"Cannot {action}: extraction already {self.state.value}")

    def feed(self, chunk: RawChunk) -> SuggestedAnswer:
        """Append one fragment and refresh the in-progress answer."""
        self._require_accumulating("feed")
        if chunk.text:
            self._parts.append(chunk.text)
        self.suggestion.answer = extract_partial_answer(self.text)
        return self.suggestion

    def finish(self) -> SuggestedAnswer:
        """Source exhausted: run the final extraction."""
        self._require_accumulating("finish")
        text = self.text
        self.suggestion = extract_suggestion(text)
        self.degradations = missing_blocks(text)
        if self.degradations:
            logger.warning("Model reply missing blocks %s (%d chars received)",
                           ", ".join(self.degradations), len(text))
        self.state = ExtractionState.COMPLETE
        return self.suggestion

    def fail(self, error: Exception) -> SuggestedAnswer:
        """Source raised: keep last-known key points / pro tip, replace the answer."""
        self._require_accumulating("fail")
        logger.error("Extraction failed after %d chars: %s", len(self.text), error)
        self.error = error
        self.suggestion.answer = ERROR_ANSWER
        self.state = ExtractionState.FAILED
        return self.suggestion

    def consume(self,
                chunks: Iterable[RawChunk],
                on_update: Optional[Callable[[SuggestedAnswer], None]] = None) -> SuggestedAnswer:
        """
        Drive the whole state machine over a chunk source.

        Args:
            chunks: Chunk source from a transport
            on_update: Called with the current suggestion after every chunk

        Returns:
            The final suggestion (COMPLETE or FAILED)
        """
        try:
            for chunk in chunks:
                self.feed(chunk)
                if on_update is not None:
                    on_update(self.suggestion)
        except (TransportError, DecodeError) as e:
            return self.fail(e)
        return self.finish()
