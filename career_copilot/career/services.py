"""
Provider-backed career features: resume analysis, cover letters, LinkedIn
suggestions, job search and the auto-apply simulator.
"""
import json
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter

from ..config import (
    MODEL_NAME, BULLETS_TEMPERATURE, COVER_LETTER_TEMPERATURE, OUTREACH_TEMPERATURE,
    CHATBOT_TEMPERATURE, CHATBOT_MAX_OUTPUT_TOKENS
)
from ..infrastructure.llm.client import response_text
from ..infrastructure.transport import ChatTransport, ProviderRequest
from .prompts import CareerPrompts, RESPONSE_SCHEMAS, resume_as_text
from .schemas import (
    ResumeData, JobAnalysis, CoverLetterTone, CustomizationSuggestion, LinkedInAnalysis,
    JobListing, AutoApplyLog, Contact, OptimizationPayload
)

logger = logging.getLogger("career_services")

_CODE_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CODE_FENCE_END = re.compile(r"\s*```$")


def parse_json_response(text: Optional[str]) -> Any:
    """
    Parse the JSON a model returned, tolerating a Markdown code fence.

    Raises:
        ValueError: If the text is empty or not valid JSON
    """
    if not text or not text.strip():
        raise ValueError("AI model returned an empty response.")

    cleaned = _CODE_FENCE_END.sub("", _CODE_FENCE_START.sub("", text.strip()))
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.error("Failed to parse JSON response: %r", text)
        raise ValueError("AI model returned invalid JSON.")


class CareerAssistant:
    """Runs the one-shot career features over a shared transport."""

    def __init__(self, transport: ChatTransport, model: str = MODEL_NAME):
        self.transport = transport
        self.model = model

    def _generate(self, contents: Union[str, Dict[str, Any]], config: Dict[str, Any]) -> str:
        request = ProviderRequest(model=self.model, contents=contents, config=config)
        return response_text(self.transport.call(request))

    def _generate_text(self, prompt: str, **config) -> str:
        return self._generate(prompt, config).strip()

    def _generate_json(self, contents: Union[str, Dict[str, Any]], schema_name: str) -> Any:
        text = self._generate(contents, {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMAS[schema_name],
        })
        return parse_json_response(text)

    def generate_resume_bullets(self, role: str, existing_text: Optional[str] = None) -> str:
        """Return 3-5 "- " bullet points for an experience entry."""
        prompt = CareerPrompts.resume_bullets(role, existing_text)
        return self._generate_text(prompt, temperature=BULLETS_TEMPERATURE)

    def analyze_resume_against_job(self, resume: ResumeData, job_description: str) -> JobAnalysis:
        prompt = CareerPrompts.job_analysis(resume_as_text(resume), job_description)
        return JobAnalysis.model_validate(self._generate_json(prompt, "job_analysis"))

    def generate_cover_letter(self,
                              resume: ResumeData,
                              company: str,
                              role: str,
                              tone: CoverLetterTone = CoverLetterTone.FORMAL,
                              manager: Optional[str] = None) -> str:
        prompt = CareerPrompts.cover_letter(
            resume_as_text(resume), company, role, CoverLetterTone(tone).value, manager
        )
        return self._generate_text(prompt, temperature=COVER_LETTER_TEMPERATURE)

    def auto_customize_resume(self, resume: ResumeData, job_description: str) -> CustomizationSuggestion:
        """Suggest summary / latest experience / skills rewrites for a job."""
        prompt = CareerPrompts.customization(resume, job_description)
        suggestion = CustomizationSuggestion.model_validate(self._generate_json(prompt, "customization"))

        known_ids = {exp.id for exp in resume.experience}
        for update in suggestion.experience or []:
            if update.id not in known_ids:
                logger.warning("Customization refers to unknown experience id %s", update.id)
        return suggestion

    def parse_and_optimize_resume_file(self,
                                       base64_file: str,
                                       mime_type: str,
                                       job_description: Optional[str] = None) -> ResumeData:
        """Structure an uploaded resume file (PDF, DOCX...) into ResumeData."""
        contents = {
            "parts": [
                {"inlineData": {"data": base64_file, "mimeType": mime_type}},
                {"text": CareerPrompts.resume_file_parse(job_description)},
            ]
        }
        return ResumeData.model_validate(self._generate_json(contents, "resume"))

    def analyze_linkedin_profile(self, resume: ResumeData, linkedin_url: str, target_role: str) -> LinkedInAnalysis:
        # The URL is context only; the provider cannot fetch it
        logger.debug("LinkedIn analysis for %s", linkedin_url)
        prompt = CareerPrompts.linkedin(resume_as_text(resume), target_role)
        return LinkedInAnalysis.model_validate(self._generate_json(prompt, "linkedin"))

    def find_jobs(self, resume: ResumeData, job_title: str, location: str) -> List[JobListing]:
        prompt = CareerPrompts.find_jobs(resume, job_title, location)
        listings = TypeAdapter(List[JobListing]).validate_python(self._generate_json(prompt, "job_listings"))
        for i, listing in enumerate(listings):
            if not listing.id:
                listing.id = f"job-{i + 1}"
        return listings

    def simulate_auto_apply_cycle(self,
                                  resume: ResumeData,
                                  job_title: str,
                                  location: str,
                                  now: Optional[datetime] = None) -> List[AutoApplyLog]:
        """Simulated log of an auto-apply run; entries are stamped locally."""
        logger.debug("Simulating auto-apply for %s", resume.name or "unnamed resume")
        prompt = CareerPrompts.auto_apply(job_title, location)
        entries = TypeAdapter(List[AutoApplyLog]).validate_python(self._generate_json(prompt, "auto_apply"))
        stamp = (now or datetime.now()).strftime("%H:%M:%S")
        for entry in entries:
            entry.timestamp = stamp
        return entries

    def get_chatbot_response(self, user_input: str) -> str:
        return self._generate_text(
            CareerPrompts.chatbot(user_input),
            temperature=CHATBOT_TEMPERATURE,
            maxOutputTokens=CHATBOT_MAX_OUTPUT_TOKENS,
        )

    def generate_outreach_message(self, resume: ResumeData, contact: Contact) -> str:
        prompt = CareerPrompts.outreach(resume, contact)
        return self._generate_text(prompt, temperature=OUTREACH_TEMPERATURE)

    def analyze_and_optimize_resume(self, resume: ResumeData, job_description: str) -> OptimizationPayload:
        prompt = CareerPrompts.optimization(resume_as_text(resume), job_description)
        return OptimizationPayload.model_validate(self._generate_json(prompt, "optimization"))
