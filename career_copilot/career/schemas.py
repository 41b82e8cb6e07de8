"""
Structured data models for resumes and provider-generated career results.

Wire format is camelCase (as the provider is asked to produce it); Python
attributes are snake_case.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both camelCase and snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump with camelCase keys, as sent to the provider."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Experience(CamelModel):
    id: str = ""
    role: str = ""
    company: str = ""
    start_date: str = ""
    end_date: str = ""
    responsibilities: str = ""


class Project(CamelModel):
    id: str = ""
    name: str = ""
    description: str = ""
    url: Optional[str] = None


class Education(CamelModel):
    id: str = ""
    institution: str = ""
    degree: str = ""
    date: str = ""


class Certification(CamelModel):
    id: str = ""
    name: str = ""
    issuer: str = ""
    date: str = ""


class Link(CamelModel):
    id: str = ""
    label: str = ""
    url: str = ""


class ResumeData(CamelModel):
    """A resume snapshot as edited in the resume builder."""
    name: str = ""
    email: str = ""
    phone: str = ""
    summary: str = ""
    experience: List[Experience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)
    skills: str = ""

    @property
    def latest_role(self) -> str:
        return self.experience[0].role if self.experience and self.experience[0].role else "Professional"


class JobAnalysis(CamelModel):
    match_score: int
    strengths: str
    weaknesses: str
    suggestions: List[str] = Field(default_factory=list)

    @field_validator("match_score")
    @classmethod
    def _score_in_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"matchScore must be between 0 and 100, got {v}")
        return v


class CoverLetterTone(str, Enum):
    """Tones offered for generated cover letters."""
    FORMAL = "Formal"
    CONVERSATIONAL = "Conversational"
    CONFIDENT = "Confident"


class ExperienceUpdate(CamelModel):
    id: str
    responsibilities: str


class CustomizationSuggestion(CamelModel):
    summary: Optional[str] = None
    experience: Optional[List[ExperienceUpdate]] = None
    skills: Optional[str] = None


class LinkedInAnalysis(CamelModel):
    score: int = 0
    headline_suggestion: str = ""
    summary_suggestion: str = ""
    experience_suggestion: str = ""
    skills_suggestion: str = ""
    education_suggestion: str = ""
    certifications_suggestion: str = ""


class JobListing(CamelModel):
    id: str = ""
    title: str
    company: str
    location: str = ""
    description: str = ""
    match_score: int = 0


class AutoApplyStatus(str, Enum):
    INFO = "Info"
    SUCCESS = "Success"
    FAILURE = "Failure"


class AutoApplyLog(CamelModel):
    timestamp: str = ""
    message: str
    status: AutoApplyStatus


class ContactStatus(str, Enum):
    TO_CONTACT = "To Contact"
    CONTACTED = "Contacted"
    FOLLOW_UP = "Follow-up"
    CONNECTED = "Connected"


class Contact(CamelModel):
    id: str = ""
    name: str
    company: str
    role: str
    status: ContactStatus = ContactStatus.TO_CONTACT


class Highlight(CamelModel):
    keyword: str
    reason: str


class OptimizationPayload(CamelModel):
    before_score: int
    after_score: int
    highlights: List[Highlight] = Field(default_factory=list)
    optimized_resume: ResumeData
