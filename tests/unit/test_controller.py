"""Unit tests for the interview turn controller."""

from datetime import datetime

import pytest

from career_copilot.config import ERROR_ANSWER, FALLBACK_ANSWER
from career_copilot.exceptions import TransportError, ValidationRejection
from career_copilot.infrastructure.transport import IpcTransport
from career_copilot.interview.controller import ControllerState, InterviewCopilot
from career_copilot.interview.events import CopilotEventBus, CopilotMetrics, EventType
from career_copilot.interview.testing import (
    RecordingInvoke,
    ScriptedTransport,
    create_sample_resume,
    provider_chunk,
    tagged_reply,
)


def _copilot(transport, **kwargs):
    bus = CopilotEventBus()
    events = []
    bus.subscribe_all(events.append)
    copilot = InterviewCopilot(
        transport,
        resume=create_sample_resume(),
        job_description="Project Manager",
        job_role="Project Manager",
        event_bus=bus,
        **kwargs,
    )
    return copilot, events


def _types(events):
    return [e.event_type for e in events]


def _reply(answer):
    return [tagged_reply(answer, ["Point one", "Point two"], "Smile.")]


@pytest.mark.unit
class TestStreaming:
    def test_partial_updates_then_final_suggestion(self):
        transport = ScriptedTransport([[
            "<ANSWER>Hel",
            "lo</ANSWER>",
            "<KEYPOINTS>\n- A\n- B\n</KEYPOINTS><PROTIP>Tip</PROTIP>",
        ]])
        copilot, events = _copilot(transport)

        turn = copilot.analyze_question("Tell me about yourself")

        updates = [e.data["answer"] for e in events if e.event_type == EventType.SUGGESTION_UPDATED]
        assert updates == ["Hel", "Hello", "Hello"]
        assert turn.suggestion.answer == "Hello"
        assert turn.suggestion.key_points == ["A", "B"]
        assert turn.suggestion.pro_tip == "Tip"
        assert copilot.state is ControllerState.IDLE
        assert _types(events)[0] == EventType.TURN_STARTED
        assert _types(events)[-1] == EventType.TURN_COMPLETED

    def test_request_shape(self):
        transport = ScriptedTransport([_reply("A")])
        copilot, _ = _copilot(transport, model="gemini-test", temperature=0.3)

        copilot.analyze_question("  Why should we hire you?  ")

        request = transport.requests[0]
        assert request.model == "gemini-test"
        assert request.config == {"temperature": 0.3}
        assert "<LatestQuestion>\nWhy should we hire you?\n</LatestQuestion>" in request.contents
        assert "Alex Morgan" in request.contents

    def test_new_turn_is_prepended(self):
        transport = ScriptedTransport([_reply("First"), _reply("Second")])
        copilot, _ = _copilot(transport)

        copilot.analyze_question("Q one")
        copilot.analyze_question("Q two")

        assert [t.question for t in copilot.turns] == ["Q two", "Q one"]
        assert copilot.latest_turn.suggestion.answer == "Second"

    def test_untagged_reply_degrades(self):
        transport = ScriptedTransport([["I would say I am great."]])
        copilot, events = _copilot(transport)

        turn = copilot.analyze_question("Strengths?")

        assert turn.suggestion.answer == FALLBACK_ANSWER
        completed = [e for e in events if e.event_type == EventType.TURN_COMPLETED][0]
        assert completed.data["missing_blocks"] == ["ANSWER", "KEYPOINTS", "PROTIP"]


@pytest.mark.unit
class TestHistory:
    def test_only_three_most_recent_turns_are_sent(self):
        transport = ScriptedTransport([_reply(f"Answer {i}") for i in range(1, 6)])
        copilot, _ = _copilot(transport)

        for i in range(1, 6):
            copilot.analyze_question(f"Question {i}")

        prompt = transport.requests[-1].contents
        assert "Q: Question 4\nA: Answer 4" in prompt
        assert "Q: Question 3" in prompt
        assert "Q: Question 2" in prompt
        assert "Q: Question 1" not in prompt
        assert "Q: Question 5" not in prompt

    def test_history_is_newest_first(self):
        transport = ScriptedTransport([_reply("A1"), _reply("A2"), _reply("A3")])
        copilot, _ = _copilot(transport)

        for q in ("First", "Second", "Third"):
            copilot.analyze_question(q)

        prompt = transport.requests[-1].contents
        assert prompt.index("Q: Second") < prompt.index("Q: First")


@pytest.mark.unit
class TestDeduplication:
    def test_case_insensitive_duplicate_replaces_prior_turn(self):
        transport = ScriptedTransport([_reply("Old"), _reply("Other"), _reply("New")])
        copilot, _ = _copilot(transport)

        copilot.analyze_question("Tell me about yourself")
        copilot.analyze_question("Biggest weakness?")
        copilot.analyze_question("tell me about YOURSELF")

        questions = [t.question for t in copilot.turns]
        assert questions == ["tell me about YOURSELF", "Biggest weakness?"]
        assert copilot.latest_turn.suggestion.answer == "New"

    def test_duplicate_is_not_sent_as_history(self):
        transport = ScriptedTransport([_reply("Old"), _reply("New")])
        copilot, _ = _copilot(transport)

        copilot.analyze_question("Why us?")
        copilot.analyze_question("WHY US?")

        assert "Q: Why us?" not in transport.requests[-1].contents


@pytest.mark.unit
class TestSingleFlight:
    def test_submission_while_streaming_is_rejected(self):
        transport = ScriptedTransport([["<ANSWER>Hel", "lo</ANSWER>"], _reply("never")])
        copilot, events = _copilot(transport)
        nested_results = []

        def submit_again(event):
            nested_results.append(copilot.analyze_question("Another question"))

        copilot.event_bus.subscribe(EventType.SUGGESTION_UPDATED, submit_again)
        copilot.analyze_question("First question")

        assert nested_results == [None, None]
        assert len(transport.requests) == 1
        assert [t.question for t in copilot.turns] == ["First question"]
        rejections = [e for e in events if e.event_type == EventType.SUBMISSION_REJECTED]
        assert {e.data["reason"] for e in rejections} == {"stream_in_flight"}

    def test_regenerate_while_streaming_is_rejected(self):
        transport = ScriptedTransport([_reply("A"), ["<ANSWER>B", "</ANSWER>"]])
        copilot, events = _copilot(transport)
        copilot.analyze_question("Q1")

        results = []
        copilot.event_bus.subscribe(
            EventType.SUGGESTION_UPDATED, lambda e: results.append(copilot.regenerate_latest())
        )
        copilot.analyze_question("Q2")

        assert results == [None, None]
        assert len(transport.requests) == 2

    def test_empty_question_is_rejected_without_io(self):
        transport = ScriptedTransport([])
        copilot, events = _copilot(transport)

        assert copilot.analyze_question("   ") is None
        assert copilot.analyze_question(None) is None
        assert transport.requests == []
        assert copilot.turns == []
        assert [e.data["reason"] for e in events] == ["empty_question", "empty_question"]


@pytest.mark.unit
class TestFailures:
    def test_transport_failure_marks_turn_failed(self):
        transport = ScriptedTransport([["<ANSWER>Partial"]], errors=[TransportError("connection reset")])
        copilot, events = _copilot(transport)

        turn = copilot.analyze_question("Question")

        assert turn.suggestion.answer == ERROR_ANSWER
        assert turn.suggestion.key_points == []
        assert turn.suggestion.pro_tip == ""
        assert copilot.state is ControllerState.IDLE
        assert transport.closed_streams == 1
        failed = [e for e in events if e.event_type == EventType.TURN_FAILED][0]
        assert failed.data["error_type"] == "TransportError"
        assert EventType.TURN_COMPLETED not in _types(events)

    def test_controller_accepts_questions_after_failure(self):
        transport = ScriptedTransport([[], _reply("Recovered")], errors=[TransportError("down"), None])
        copilot, _ = _copilot(transport)

        copilot.analyze_question("First")
        turn = copilot.analyze_question("Second")

        assert turn.suggestion.answer == "Recovered"

    def test_unexpected_error_fails_turn_and_propagates(self):
        transport = ScriptedTransport([["<ANSWER>x"]], errors=[ValueError("bug")])
        copilot, events = _copilot(transport)

        with pytest.raises(ValueError):
            copilot.analyze_question("Question")

        assert copilot.latest_turn.suggestion.answer == ERROR_ANSWER
        assert copilot.state is ControllerState.IDLE
        assert EventType.TURN_FAILED in _types(events)


@pytest.mark.unit
class TestCancellation:
    def test_reset_during_stream_discards_result(self):
        transport = ScriptedTransport([["<ANSWER>Hel", "lo</ANSWER>", "<PROTIP>x</PROTIP>"]])
        copilot, events = _copilot(transport)

        def reset_once(event):
            if event.data["chunk_index"] == 1:
                copilot.reset_session()

        copilot.event_bus.subscribe(EventType.SUGGESTION_UPDATED, reset_once)
        copilot.analyze_question("Question")

        assert copilot.turns == []
        assert copilot.state is ControllerState.IDLE
        assert transport.closed_streams == 1
        types = _types(events)
        assert EventType.SESSION_RESET in types
        assert EventType.TURN_DISCARDED in types
        assert EventType.TURN_COMPLETED not in types
        assert len([t for t in types if t == EventType.SUGGESTION_UPDATED]) == 1

    def test_new_question_after_reset_is_not_overwritten(self):
        transport = ScriptedTransport([
            ["<ANSWER>Old", " answer</ANSWER>"],
            _reply("New answer"),
        ])
        copilot, events = _copilot(transport)
        fired = []

        def reset_and_ask(event):
            if not fired:
                fired.append(True)
                copilot.reset_session()
                copilot.analyze_question("New question")

        copilot.event_bus.subscribe(EventType.SUGGESTION_UPDATED, reset_and_ask)
        copilot.analyze_question("Old question")

        assert [t.question for t in copilot.turns] == ["New question"]
        assert copilot.latest_turn.suggestion.answer == "New answer"
        assert copilot.state is ControllerState.IDLE
        assert transport.closed_streams == 2

    def test_single_chunk_channel_result_is_discarded(self):
        invoke = RecordingInvoke([provider_chunk(tagged_reply("Late", ["k"], "t"))])
        copilot, events = _copilot(IpcTransport(invoke))
        copilot.event_bus.subscribe(EventType.SUGGESTION_UPDATED, lambda e: copilot.reset_session())

        copilot.analyze_question("Question")

        assert copilot.turns == []
        assert EventType.TURN_DISCARDED in _types(events)
        assert EventType.TURN_COMPLETED not in _types(events)

    def test_reset_keeps_role_and_job_description(self):
        copilot, events = _copilot(ScriptedTransport([_reply("A")]))
        copilot.analyze_question("Q")

        copilot.reset_session()

        assert copilot.turns == []
        assert copilot.job_role == "Project Manager"
        reset = [e for e in events if e.event_type == EventType.SESSION_RESET][0]
        assert reset.data["cleared_turns"] == 1
        assert reset.turn_id is None


@pytest.mark.unit
class TestRegenerate:
    def test_replaces_latest_turn(self):
        transport = ScriptedTransport([_reply("A1"), _reply("A2"), _reply("A2 again")])
        copilot, events = _copilot(transport)
        copilot.analyze_question("Q1")
        original = copilot.analyze_question("Q2")

        regenerated = copilot.regenerate_latest()

        assert [t.question for t in copilot.turns] == ["Q2", "Q1"]
        assert copilot.latest_turn is regenerated
        assert regenerated.id != original.id
        assert regenerated.suggestion.answer == "A2 again"
        prompt = transport.requests[-1].contents
        assert "Q: Q1" in prompt
        assert "Q: Q2" not in prompt
        started = [e for e in events if e.event_type == EventType.TURN_STARTED]
        assert started[-1].data["regenerated"] is True

    def test_nothing_to_regenerate(self):
        copilot, events = _copilot(ScriptedTransport([]))
        assert copilot.regenerate_latest() is None
        assert events[-1].data["reason"] == "no_turns"


@pytest.mark.unit
class TestSessionAndExport:
    def test_start_session_requires_role(self):
        copilot, _ = _copilot(ScriptedTransport([]))
        with pytest.raises(ValidationRejection) as excinfo:
            copilot.start_session("   ")
        assert excinfo.value.reason == "missing_job_role"

    def test_start_session_sets_role(self):
        copilot, _ = _copilot(ScriptedTransport([]))
        copilot.start_session(" Data Engineer ", "Build pipelines")
        assert copilot.job_role == "Data Engineer"
        assert copilot.job_description == "Build pipelines"

    def test_export_log_oldest_first(self):
        transport = ScriptedTransport([
            [tagged_reply("A1", ["K1", "K2"], "Tip 1")],
            [tagged_reply("A2", ["K3"], "Tip 2")],
        ])
        copilot, _ = _copilot(transport)
        copilot.analyze_question("Q1")
        copilot.analyze_question("Q2")
        for turn in copilot.turns:
            turn.timestamp = "10:00:00"

        log = copilot.export_log(now=datetime(2024, 5, 1, 9, 30))

        divider = "-" * 50
        assert log == (
            "Interview Copilot Log for Project Manager\n"
            "Date: 2024-05-01 09:30:00\n"
            "\n"
            f"{divider}\n"
            "[10:00:00] Question:\nQ1\n\n"
            "AI Suggested Answer:\nA1\n\n"
            "Key Points:\n- K1\n- K2\n\n"
            "Pro-Tip: Tip 1\n\n"
            f"{divider}\n"
            "[10:00:00] Question:\nQ2\n\n"
            "AI Suggested Answer:\nA2\n\n"
            "Key Points:\n- K3\n\n"
            "Pro-Tip: Tip 2\n\n"
        )

    def test_save_log(self, tmp_path):
        copilot, _ = _copilot(ScriptedTransport([_reply("Saved answer")]))
        copilot.analyze_question("Q")

        path = copilot.save_log(str(tmp_path / "logs" / "session.txt"))

        with open(path, encoding="utf-8") as f:
            content = f.read()
        assert "Saved answer" in content
        assert content.startswith("Interview Copilot Log for Project Manager")

    def test_default_log_filename(self):
        copilot, _ = _copilot(ScriptedTransport([]))
        assert copilot.default_log_filename() == "interview-log-Project_Manager.txt"


@pytest.mark.unit
def test_metrics_follow_turn_lifecycle():
    transport = ScriptedTransport(
        [_reply("ok"), ["<ANSWER>x"], ["no tags"]],
        errors=[None, TransportError("down"), None],
    )
    copilot, _ = _copilot(transport)
    metrics = CopilotMetrics()
    copilot.event_bus.subscribe_all(metrics.handle_event)

    copilot.analyze_question("One")
    copilot.analyze_question("Two")
    copilot.analyze_question("Three")
    copilot.analyze_question("")

    assert metrics.get_metrics() == {
        "turns_started": 3,
        "turns_completed": 2,
        "turns_failed": 1,
        "turns_discarded": 0,
        "degraded_turns": 1,
        "chunks_processed": 3,
        "submissions_rejected": 1,
    }
