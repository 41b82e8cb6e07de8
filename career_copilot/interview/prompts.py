"""
Interview copilot prompt templates and request building.

Everything here is pure: application state in, prompt / request out.
"""

from typing import List, Optional, Sequence

from ..career.prompts import resume_as_text
from ..career.schemas import ResumeData
from ..config import MODEL_NAME, ANSWER_TEMPERATURE, HISTORY_TURNS
from ..infrastructure.transport.base import ProviderRequest
from .models import InterviewTurn

ANSWER_TAG = "ANSWER"
KEYPOINTS_TAG = "KEYPOINTS"
PROTIP_TAG = "PROTIP"


class InterviewPrompts:
    """Collection of interview copilot prompts."""

    @staticmethod
    def answer_prompt(resume_text: str, job_description: str, question: str, history_text: str) -> str:
        """Prompt asking for a tagged ANSWER / KEYPOINTS / PROTIP reply."""
        return f"""
You are a live interview coach. The user is in an interview for a {job_description or 'new role'}. Based on their resume and the interview question, provide a structured, high-quality answer.

<Resume>
{resume_text}
</Resume>

<InterviewHistory>
{history_text}
</InterviewHistory>

<LatestQuestion>
{question}
</LatestQuestion>

Instructions:
1.  Generate a concise, well-structured answer to the question.
2.  Use the STAR (Situation, Task, Action, Result) method where appropriate.
3.  Tailor the answer to the user's experience shown in their resume.
4.  Provide 3-4 key talking points as a bulleted list.
5.  Offer a "Pro Tip" for delivering the answer effectively.
6.  Format your response EXACTLY as follows, with these specific tags:
<{ANSWER_TAG}>
[Your suggested answer here]
</{ANSWER_TAG}>
<{KEYPOINTS_TAG}>
- [Key Point 1]
- [Key Point 2]
- [Key Point 3]
</{KEYPOINTS_TAG}>
<{PROTIP_TAG}>
[Your pro tip here]
</{PROTIP_TAG}>
        """.strip()


def format_history(turns: Sequence[InterviewTurn]) -> str:
    """Render prior turns as Q/A pairs."""
    return "\n\n".join(f"Q: {turn.question}\nA: {turn.suggestion.answer}" for turn in turns)


def build_answer_request(resume: Optional[ResumeData],
                         job_description: str,
                         question: str,
                         history: Sequence[InterviewTurn] = (),
                         model: str = MODEL_NAME,
                         temperature: float = ANSWER_TEMPERATURE) -> ProviderRequest:
    """
    Build the streaming request for one interview question.

    Args:
        resume: Resume snapshot (an empty resume when None)
        job_description: Role / job description text, may be empty
        question: The interview question
        history: Earlier turns, newest first; only the first few are sent
        model: Provider model identifier
        temperature: Sampling temperature

    Returns:
        ProviderRequest ready for a transport
    """
    recent: List[InterviewTurn] = list(history)[:HISTORY_TURNS]
    prompt = InterviewPrompts.answer_prompt(
        resume_as_text(resume or ResumeData()),
        job_description,
        question,
        format_history(recent),
    )
    return ProviderRequest(model=model, contents=prompt, config={"temperature": temperature})
