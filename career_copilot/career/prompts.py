"""
Career feature prompt templates and response schemas.

This module contains the prompts sent for the non-interview features
(resume analysis, cover letters, LinkedIn, job search...), keeping them
separate from the service logic for easier maintenance and editing.
"""

import json
from typing import Optional

from .schemas import ResumeData, Contact


def _indent_lines(text: str, prefix: str) -> str:
    return "\n".join(f"{prefix}{line}" for line in text.split("\n"))


def resume_as_text(resume: ResumeData) -> str:
    """Serialize a resume snapshot into the plain-text form used in prompts."""
    links = " | ".join(f"{link.label}: {link.url}" for link in resume.links)

    experience = "\n".join(
        f"- Role: {exp.role} at {exp.company} ({exp.start_date} - {exp.end_date})\n"
        f"  Responsibilities:\n{_indent_lines(exp.responsibilities, '    ')}"
        for exp in resume.experience
    )
    education = "\n".join(
        f"- {edu.degree} from {edu.institution} ({edu.date})" for edu in resume.education
    )
    projects = "\n".join(
        f"- Project: {proj.name}{f' ({proj.url})' if proj.url else ''}\n"
        f"  Description: {proj.description}"
        for proj in resume.projects
    )
    certifications = "\n".join(
        f"- {cert.name} from {cert.issuer} ({cert.date})" for cert in resume.certifications
    )

    return f"""
Name: {resume.name}
Contact: {resume.email}, {resume.phone}
Links: {links}

Professional Summary:
{resume.summary}

Skills:
{resume.skills}

Work Experience:
{experience}

Education:
{education}

Projects:
{projects}

Certifications:
{certifications}
    """.strip()


# Response schemas in the provider's OpenAPI subset

_RESUME_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING"},
        "email": {"type": "STRING"},
        "phone": {"type": "STRING"},
        "summary": {"type": "STRING"},
        "experience": {"type": "ARRAY", "items": {"type": "OBJECT", "properties": {
            "id": {"type": "STRING"}, "role": {"type": "STRING"}, "company": {"type": "STRING"},
            "startDate": {"type": "STRING"}, "endDate": {"type": "STRING"},
            "responsibilities": {"type": "STRING"}}}},
        "education": {"type": "ARRAY", "items": {"type": "OBJECT", "properties": {
            "id": {"type": "STRING"}, "institution": {"type": "STRING"},
            "degree": {"type": "STRING"}, "date": {"type": "STRING"}}}},
        "projects": {"type": "ARRAY", "items": {"type": "OBJECT", "properties": {
            "id": {"type": "STRING"}, "name": {"type": "STRING"},
            "description": {"type": "STRING"}, "url": {"type": "STRING"}}}},
        "certifications": {"type": "ARRAY", "items": {"type": "OBJECT", "properties": {
            "id": {"type": "STRING"}, "name": {"type": "STRING"},
            "issuer": {"type": "STRING"}, "date": {"type": "STRING"}}}},
        "links": {"type": "ARRAY", "items": {"type": "OBJECT", "properties": {
            "id": {"type": "STRING"}, "label": {"type": "STRING"}, "url": {"type": "STRING"}}}},
        "skills": {"type": "STRING"},
    },
}

RESPONSE_SCHEMAS = {
    "job_analysis": {
        "type": "OBJECT",
        "properties": {
            "matchScore": {"type": "INTEGER", "description": "Resume match score from 0-100."},
            "strengths": {"type": "STRING", "description": "Strengths of the resume against the job."},
            "weaknesses": {"type": "STRING", "description": "Weaknesses of the resume against the job."},
            "suggestions": {"type": "ARRAY", "items": {"type": "STRING"},
                            "description": "Suggestions for improvement."},
        },
        "required": ["matchScore", "strengths", "weaknesses", "suggestions"],
    },
    "customization": {
        "type": "OBJECT",
        "properties": {
            "summary": {"type": "STRING", "description": "New summary text."},
            "experience": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {"id": {"type": "STRING"}, "responsibilities": {"type": "STRING"}},
                    "required": ["id", "responsibilities"],
                },
            },
            "skills": {"type": "STRING", "description": "New skills string."},
        },
    },
    "resume": _RESUME_SCHEMA,
    "linkedin": {
        "type": "OBJECT",
        "properties": {
            "score": {"type": "INTEGER"},
            "headlineSuggestion": {"type": "STRING"},
            "summarySuggestion": {"type": "STRING"},
            "experienceSuggestion": {"type": "STRING"},
            "skillsSuggestion": {"type": "STRING"},
            "educationSuggestion": {"type": "STRING"},
            "certificationsSuggestion": {"type": "STRING"},
        },
    },
    "job_listings": {
        "type": "ARRAY",
        "items": {"type": "OBJECT", "properties": {
            "id": {"type": "STRING"}, "title": {"type": "STRING"}, "company": {"type": "STRING"},
            "location": {"type": "STRING"}, "description": {"type": "STRING"},
            "matchScore": {"type": "INTEGER"}}},
    },
    "auto_apply": {
        "type": "ARRAY",
        "items": {"type": "OBJECT", "properties": {
            "message": {"type": "STRING"},
            "status": {"type": "STRING", "enum": ["Info", "Success", "Failure"]}}},
    },
    "optimization": {
        "type": "OBJECT",
        "properties": {
            "beforeScore": {"type": "INTEGER"},
            "afterScore": {"type": "INTEGER"},
            "highlights": {"type": "ARRAY", "items": {"type": "OBJECT", "properties": {
                "keyword": {"type": "STRING"}, "reason": {"type": "STRING"}}}},
            "optimizedResume": _RESUME_SCHEMA,
        },
    },
}


class CareerPrompts:
    """Collection of the career feature prompts."""

    @staticmethod
    def resume_bullets(role: str, existing_text: Optional[str] = None) -> str:
        draft = f"Current Draft / Notes:\n{existing_text}" if existing_text else ""
        return f"""
You are an expert resume writer. Your task is to generate 3-5 concise, action-oriented, and quantifiable bullet points for a resume's work experience section.
Role: {role}
{draft}
Instructions:
- Start each bullet point with a strong action verb.
- Quantify achievements with metrics where possible (e.g., "Increased efficiency by 20%", "Managed a team of 5", "Reduced costs by $10k").
- Focus on accomplishments, not just duties.
- Format the output as a list of bullet points, each starting with '- '.
- Do not add any introductory or concluding text, only the bullet points.
        """.strip()

    @staticmethod
    def job_analysis(resume_text: str, job_description: str) -> str:
        return f"""
Analyze the following resume against the job description and provide a detailed analysis.

<Resume>
{resume_text}
</Resume>

<JobDescription>
{job_description}
</JobDescription>

Provide your response in JSON format. The JSON object should have the following structure:
- "matchScore": An integer between 0 and 100 representing the percentage match.
- "strengths": A paragraph explaining what makes the candidate a strong fit.
- "weaknesses": A paragraph explaining the key areas where the resume is lacking for this specific role.
- "suggestions": An array of 3-5 specific, actionable suggestions for improving the resume to better match the job description.
        """.strip()

    @staticmethod
    def cover_letter(resume_text: str, company: str, role: str, tone: str,
                     manager: Optional[str] = None) -> str:
        manager_line = f"Hiring Manager: {manager}" if manager else ""
        return f"""
Generate a compelling cover letter based on the provided resume and job details.

Tone: {tone}
Company: {company}
Job Role: {role}
{manager_line}

Resume:
{resume_text}

Instructions:
1.  Address the letter to the hiring manager if their name is provided, otherwise use a generic greeting.
2.  Craft a strong opening paragraph that grabs attention and states the desired position.
3.  In the body, highlight 2-3 key experiences or skills from the resume that are most relevant to the role.
4.  Maintain the specified tone throughout the letter.
5.  Conclude with a strong call to action.
6.  Keep the letter concise, around 3-4 paragraphs.
7.  Do not include placeholders like "[Your Name]" or "[Date]". The letter should be ready to use.
        """.strip()

    @staticmethod
    def customization(resume: ResumeData, job_description: str) -> str:
        return f"""
Analyze the provided resume and job description. Suggest specific, targeted modifications to the resume to make it a stronger fit for the job. Only suggest changes for the summary, the most recent experience section, and the skills section.

<Resume>
{json.dumps(resume.to_wire(), indent=2, ensure_ascii=False)}
</Resume>

<JobDescription>
{job_description}
</JobDescription>

Return a JSON object with optional keys: "summary", "experience", "skills".
- "summary": A re-written professional summary.
- "experience": An array containing objects with "id" and "responsibilities" for the ONE experience entry you are updating. The 'id' MUST match an ID from the input resume. 'responsibilities' should be a string with new bullet points.
- "skills": A new comma-separated string of skills.
Your suggestions should be subtle and maintain the candidate's voice.
        """.strip()

    @staticmethod
    def resume_file_parse(job_description: Optional[str] = None) -> str:
        return f"""
Parse the provided resume file and structure it into a JSON object matching the ResumeData format. If a job description is provided, optimize the content (summary, latest experience, skills) to align with it.

Job Description (if any):
{job_description or 'N/A'}

Return ONLY the JSON object. Do not include any other text or markdown. The JSON should conform to the schema.
        """.strip()

    @staticmethod
    def linkedin(resume_text: str, target_role: str) -> str:
        return f"""
Analyze the user's career profile based on their resume and target role. Provide suggestions to optimize a LinkedIn profile. The LinkedIn URL is for context but you can't access it. Base your analysis on the provided resume.

Resume:
{resume_text}

Target Role: {target_role}

Return a JSON object with suggestions for a LinkedIn profile.
        """.strip()

    @staticmethod
    def find_jobs(resume: ResumeData, job_title: str, location: str) -> str:
        return f"""
Based on the provided resume summary and search criteria, generate a realistic list of 5 job listings.

Resume Highlights:
Summary: {resume.summary}
Skills: {resume.skills}

Search Criteria:
Job Title: {job_title}
Location: {location}

For each job, provide a title, company, location, a short description, and a "matchScore" from 70-95. Return as a JSON array.
        """.strip()

    @staticmethod
    def auto_apply(job_title: str, location: str) -> str:
        return f"""
Simulate an auto-apply job cycle for a user with the target role "{job_title}" in "{location}". Generate a sequence of 5-7 log entries representing the process.

Return a JSON array of log objects. Each object should have "message" (string) and "status" ('Info', 'Success', or 'Failure').
        """.strip()

    @staticmethod
    def chatbot(user_input: str) -> str:
        return (
            "You are a friendly and helpful career assistant chatbot. Provide a concise and "
            f"encouraging response to the user's query. User: \"{user_input}\""
        )

    @staticmethod
    def outreach(resume: ResumeData, contact: Contact) -> str:
        return f"""
Generate a concise and professional networking outreach message for LinkedIn. The message should be based on the user's profile and the contact's details.

User's Role: {resume.latest_role}
Contact Name: {contact.name}
Contact Role: {contact.role}
Contact Company: {contact.company}

Keep it brief, under 100 words.
        """.strip()

    @staticmethod
    def optimization(resume_text: str, job_description: str) -> str:
        return f"""
Analyze the provided resume against the job description. Then, create an optimized version of the resume.

<Resume>
{resume_text}
</Resume>

<JobDescription>
{job_description}
</JobDescription>

Return a JSON object with the following structure:
- "beforeScore": An integer score (0-100) of the original resume.
- "afterScore": An integer score (0-100) of the new, optimized resume.
- "highlights": An array of objects, each with "keyword" and "reason" for the changes.
- "optimizedResume": The full, optimized resume data in the same JSON format as the input.
        """.strip()
