"""
Testing infrastructure for the interview copilot.

Provides scripted transports and sample data so the streaming pipeline can be
exercised without a relay or provider.
"""
import json
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ..career.schemas import ResumeData, Experience, Education, Certification, Link
from ..infrastructure.transport.base import ChatTransport, ProviderRequest, RawChunk


def provider_chunk(text: str) -> Dict[str, Any]:
    """A provider response object in the Gemini REST shape."""
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def ndjson_body(texts: Sequence[str]) -> bytes:
    """Relay response body streaming the given fragments."""
    return b"".join(json.dumps(provider_chunk(t)).encode("utf-8") + b"\n" for t in texts)


def tagged_reply(answer: str, key_points: Sequence[str], pro_tip: str) -> str:
    """A well-formed model reply."""
    bullets = "\n".join(f"- {point}" for point in key_points)
    return (
        f"<ANSWER>\n{answer}\n</ANSWER>\n"
        f"<KEYPOINTS>\n{bullets}\n</KEYPOINTS>\n"
        f"<PROTIP>\n{pro_tip}\n</PROTIP>"
    )


class ScriptedTransport(ChatTransport):
    """
    Transport that plays back scripted fragments.

    Each stream() call consumes the next script. A script may end with an
    exception, raised after its fragments have been delivered.
    """

    name = "scripted"

    def __init__(self,
                 scripts: Sequence[Sequence[str]],
                 errors: Optional[Sequence[Optional[Exception]]] = None,
                 responses: Optional[Sequence[Dict[str, Any]]] = None):
        self.scripts = [list(s) for s in scripts]
        self.errors = list(errors) if errors is not None else [None] * len(self.scripts)
        self.responses = list(responses or [])
        self.requests: List[ProviderRequest] = []
        self.closed_streams = 0
        self.delivered = 0

    def stream(self, request: ProviderRequest) -> Iterator[RawChunk]:
        self.requests.append(request)
        index = len(self.requests) - 1
        script = self.scripts[index] if index < len(self.scripts) else []
        error = self.errors[index] if index < len(self.errors) else None
        return self._play(script, error)

    def _play(self, script: List[str], error: Optional[Exception]) -> Iterator[RawChunk]:
        try:
            for text in script:
                self.delivered += 1
                yield RawChunk.from_payload(provider_chunk(text))
            if error is not None:
                raise error
        finally:
            self.closed_streams += 1

    def call(self, request: ProviderRequest) -> Dict[str, Any]:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("ScriptedTransport has no scripted call() responses left")
        return self.responses.pop(0)


class RecordingInvoke:
    """Stand-in for an IPC handle; returns canned JSON strings in order."""

    def __init__(self, replies: Sequence[Any]):
        self.replies = list(replies)
        self.payloads: List[Dict[str, Any]] = []

    def __call__(self, payload: Dict[str, Any]) -> str:
        self.payloads.append(payload)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply if isinstance(reply, str) else json.dumps(reply)


def create_sample_resume() -> ResumeData:
    """Resume used across tests and the CLI's default session."""
    return ResumeData(
        name="Alex Morgan",
        email="alex.morgan@example.com",
        phone="+1-555-0100",
        summary="Operations leader moving into project management.",
        experience=[
            Experience(
                id="exp-1",
                role="Operations Manager",
                company="Northwind Logistics",
                start_date="2018",
                end_date="2024",
                responsibilities="- Led a team of 40 across three sites.\n- Cut delivery delays by 25%.",
            )
        ],
        education=[
            Education(id="edu-1", institution="State University",
                      degree="BSc Computer Science", date="2014-2018")
        ],
        certifications=[
            Certification(id="cert-1", name="Project Management Professional (PMP)",
                          issuer="PMI", date="2023")
        ],
        links=[Link(id="link-1", label="LinkedIn", url="https://linkedin.com/in/alexmorgan")],
        skills="Project planning, Risk management, Stakeholder communication",
    )
