#!/usr/bin/env python3
"""
Main entry point for the interview copilot.
Allows running the package with: python -m career_copilot
"""
import sys
from typing import Optional

from pydantic import ValidationError

from .config import get_config
from .career.schemas import ResumeData
from .exceptions import ValidationRejection
from .infrastructure.transport import create_transport
from .interview.controller import InterviewCopilot
from .interview.events import (
    CopilotEventBus, EventLogger, CopilotMetrics, EventType, CopilotEvent
)
from .interview.testing import create_sample_resume
from .utils import setup_logging

HELP = """Commands:
  :regen        regenerate the latest answer
  :reset        clear the session
  :save [PATH]  save the session log
  :quit         exit
Anything else is sent as an interview question."""


class ConsoleRenderer:
    """Prints streamed answers as they grow."""

    def __init__(self):
        self._shown = ""

    def handle_event(self, event: CopilotEvent) -> None:
        if event.event_type == EventType.TURN_STARTED:
            self._shown = ""
            print("\n💡 ", end="", flush=True)
        elif event.event_type == EventType.SUGGESTION_UPDATED:
            self._show(event.data["answer"])
        elif event.event_type == EventType.TURN_COMPLETED:
            self._show(event.data["answer"])
            print()
            if event.data["key_points"]:
                print("\n⭐ Key points:")
                for point in event.data["key_points"]:
                    print(f"   - {point}")
            if event.data["pro_tip"]:
                print(f"\n🧠 Pro tip: {event.data['pro_tip']}")
        elif event.event_type == EventType.TURN_FAILED:
            print(f"\n❌ Failed to generate suggestions: {event.data['error_message']}")
        elif event.event_type == EventType.SUBMISSION_REJECTED:
            print(f"⚠️  {event.data['message']}")

    def _show(self, answer: str) -> None:
        # Each update carries the whole answer so far
        if answer.startswith(self._shown):
            print(answer[len(self._shown):], end="", flush=True)
        else:
            print(f"\r{answer}", end="", flush=True)
        self._shown = answer


def _load_resume(path: Optional[str]) -> ResumeData:
    if not path:
        return create_sample_resume()
    with open(path, "r", encoding="utf-8") as f:
        return ResumeData.model_validate_json(f.read())


def _read_text(path: Optional[str]) -> str:
    if not path:
        return ""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _save_log(copilot: InterviewCopilot, path: Optional[str]) -> Optional[str]:
    """Save the session log; a failed write is reported and the session goes on."""
    try:
        saved = copilot.save_log(path)
    except OSError as e:
        print(f"❌ Could not save log: {e}")
        return None
    print(f"💾 Saved to {saved}")
    return saved


def main():
    """Command-line interface for the interview copilot."""

    # Load configuration from environment
    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    job_role = ""
    jd_path = None
    resume_path = None
    for arg in sys.argv[1:]:
        if arg == "--ipc":
            config.transport = "ipc"
        elif arg == "--relay":
            config.transport = "relay"
        elif arg.startswith("--relay="):
            config.transport = "relay"
            config.relay_url = arg.split("=", 1)[1]
        elif arg.startswith("--role="):
            job_role = arg.split("=", 1)[1]
        elif arg.startswith("--jd="):
            jd_path = arg.split("=", 1)[1]
        elif arg.startswith("--resume="):
            resume_path = arg.split("=", 1)[1]
        elif arg in ("-h", "--help"):
            print("Usage: python -m career_copilot [--ipc | --relay[=URL]] --role=ROLE [--jd=FILE] [--resume=FILE.json]")
            print(HELP)
            return
        else:
            print(f"❌ Unknown argument: {arg}")
            sys.exit(1)

    log_file = setup_logging(config.log_file, config.log_level)

    try:
        resume = _load_resume(resume_path)
        job_description = _read_text(jd_path)
    except (OSError, ValidationError) as e:
        print(f"❌ Could not load input: {e}")
        sys.exit(1)

    try:
        transport = create_transport(config)
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    event_bus = CopilotEventBus()
    metrics = CopilotMetrics()
    event_bus.subscribe_all(EventLogger().handle_event)
    event_bus.subscribe_all(metrics.handle_event)
    event_bus.subscribe_all(ConsoleRenderer().handle_event)

    copilot = InterviewCopilot(
        transport,
        resume=resume,
        event_bus=event_bus,
        model=config.model_name,
        temperature=config.answer_temperature,
    )
    try:
        copilot.start_session(job_role or input("Job role: "), job_description)
    except ValidationRejection as e:
        print(f"❌ {e}")
        sys.exit(1)

    print(f"\n🎙️  Interview copilot ready ({transport.name} transport) - role: {copilot.job_role}")
    print(f"📝 Detailed logs: {log_file}")
    print(HELP)
    print("=" * 50)

    try:
        while True:
            try:
                line = input("\n❓ ").strip()
            except EOFError:
                break
            if not line:
                continue
            if line == ":quit":
                break
            elif line == ":regen":
                copilot.regenerate_latest()
            elif line == ":reset":
                copilot.reset_session()
                print("🧹 Session cleared")
            elif line.startswith(":save"):
                _save_log(copilot, line[len(":save"):].strip() or None)
            else:
                copilot.analyze_question(line)
    except KeyboardInterrupt:
        print()
    finally:
        transport.close()

    print(f"📊 {metrics.get_metrics()}")


if __name__ == "__main__":
    main()
