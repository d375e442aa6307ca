from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class QuestionCategory(str, Enum):
    TECHNICAL = "Technical"
    BEHAVIORAL = "Behavioral"
    EXPERIENCE = "Experience"
    PROBLEM_SOLVING = "Problem Solving"
    LEADERSHIP = "Leadership"


CATEGORY_LABELS: tuple[str, ...] = tuple(category.value for category in QuestionCategory)


@dataclass(frozen=True)
class Question:
    question: str
    category: QuestionCategory

    def to_dict(self) -> dict[str, str]:
        return {"question": self.question, "type": self.category.value}


@dataclass
class User:
    id: str
    auth_id: str
    skills: list[str] = field(default_factory=list)
    experience: int = 0
    industry: Optional[str] = None
    bio: Optional[str] = None


@dataclass
class Interview:
    id: str
    user_id: str
    job_title: str
    company_name: str
    job_description: str
    interview_type: str = "General"
    duration: int = 30
    questions: list[Question] = field(default_factory=list)
    created_at: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        """Client-facing shape, keyed the way the frontend reads interviews."""
        return {
            "interviewId": self.id,
            "userId": self.user_id,
            "jobTitle": self.job_title,
            "companyName": self.company_name,
            "jobDescription": self.job_description,
            "interviewType": self.interview_type,
            "duration": self.duration,
            "questions": [q.to_dict() for q in self.questions],
            "createdAt": self.created_at,
        }
