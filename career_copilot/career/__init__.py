"""Career features built on one-shot provider calls.

Resume analysis and optimization, cover letters, LinkedIn suggestions,
job search, networking outreach and the auto-apply simulator.
"""

from .schemas import (
    ResumeData, Experience, Education, Project, Certification, Link,
    JobAnalysis, CoverLetterTone, CustomizationSuggestion, ExperienceUpdate,
    LinkedInAnalysis, JobListing, AutoApplyLog, AutoApplyStatus,
    Contact, ContactStatus, Highlight, OptimizationPayload
)
from .prompts import CareerPrompts, resume_as_text
from .services import CareerAssistant, parse_json_response

__all__ = [
    # Schemas
    "ResumeData", "Experience", "Education", "Project", "Certification", "Link",
    "JobAnalysis", "CoverLetterTone", "CustomizationSuggestion", "ExperienceUpdate",
    "LinkedInAnalysis", "JobListing", "AutoApplyLog", "AutoApplyStatus",
    "Contact", "ContactStatus", "Highlight", "OptimizationPayload",

    # Prompts
    "CareerPrompts", "resume_as_text",

    # Services
    "CareerAssistant", "parse_json_response"
]
