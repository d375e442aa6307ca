"""Builds the question-generation prompt from an interview and its owner."""

from typing import Any

from .models import CATEGORY_LABELS, Interview, User

_PROMPT_TEMPLATE = """
You are an expert technical interviewer. Based on the following inputs, generate a well-structured list of high-quality interview questions.

Job Title: {job_title}
Company Name: {company_name}
Job Description: {job_description}
Interview Type: {interview_type}
User Skills: {skills}
User Experience: {experience} years
Interview Duration: {duration} minutes

Generate exactly 8-10 questions covering different aspects:
- 3-4 Technical questions (specific to the role and job description)
- 2-3 Behavioral questions
- 1-2 Experience-based questions
- 1-2 Problem-solving scenarios

Rules:
1) Return a valid JSON array only. No markdown, no comments, no prose.
2) Each element has exactly two fields: "question" and "type".
3) "type" must be one of: {categories}.

Format:
[
  {{
    "question": "string",
    "type": "{category_union}"
  }}
]
"""


def _text_or_na(value: Any, placeholder: str = "N/A") -> str:
    if isinstance(value, str) and value.strip():
        return value
    return placeholder


def build_question_prompt(interview: Interview, user: User) -> str:
    skills = [s.strip() for s in (user.skills or []) if isinstance(s, str) and s.strip()]
    experience = user.experience if isinstance(user.experience, int) and user.experience > 0 else 0
    duration = interview.duration if isinstance(interview.duration, int) and interview.duration > 0 else 30

    return _PROMPT_TEMPLATE.format(
        job_title=_text_or_na(interview.job_title),
        company_name=_text_or_na(interview.company_name),
        job_description=_text_or_na(interview.job_description),
        interview_type=_text_or_na(interview.interview_type, "General"),
        skills=", ".join(skills) or "N/A",
        experience=experience,
        duration=duration,
        categories=", ".join(CATEGORY_LABELS),
        category_union=" | ".join(CATEGORY_LABELS),
    )
