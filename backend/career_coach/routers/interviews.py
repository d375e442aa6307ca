"""Interview API router: save job details, generate questions, read interviews."""

import os
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ..deps import get_auth_id, get_question_generator
from ..engines.interviews.question_generator import QuestionGenerator

router = APIRouter(prefix="", tags=["interviews"])


def _reads_require_owner() -> bool:
    value = os.environ.get("INTERVIEW_READS_REQUIRE_OWNER", "1").strip().lower()
    return value not in {"0", "false", "no", "off"}


class SaveJobRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    job_title: str = Field(alias="jobTitle", min_length=2)
    company_name: str = Field(alias="companyName", min_length=2)
    job_description: str = Field(alias="jobDescription", min_length=10)


# ── Endpoints ─────────────────────────────────────────────────────────────

@router.post("/interviews")
def save_job_to_interview(
    body: SaveJobRequest,
    auth_id: Optional[str] = Depends(get_auth_id),
    generator: QuestionGenerator = Depends(get_question_generator),
):
    """Save job details as a new interview; questions are generated separately."""
    result = generator.save_job_to_interview(
        auth_id,
        job_title=body.job_title,
        company_name=body.company_name,
        job_description=body.job_description,
    )
    return {
        "success": True,
        "interviewId": result["interview_id"],
        "message": result["message"],
    }


@router.post("/interviews/{interview_id}/generate")
async def generate_questions(
    interview_id: str,
    auth_id: Optional[str] = Depends(get_auth_id),
    generator: QuestionGenerator = Depends(get_question_generator),
):
    """Generate (or regenerate) the question list for an interview."""
    questions = await generator.generate_questions(auth_id, interview_id)
    return {
        "interviewId": interview_id,
        "questions": [q.to_dict() for q in questions],
    }


@router.get("/interviews")
def list_interviews(
    auth_id: Optional[str] = Depends(get_auth_id),
    generator: QuestionGenerator = Depends(get_question_generator),
):
    """Return the caller's interviews, newest first."""
    return [interview.to_payload() for interview in generator.list_interviews(auth_id)]


@router.get("/interviews/{interview_id}")
def get_interview(
    interview_id: str,
    auth_id: Optional[str] = Depends(get_auth_id),
    generator: QuestionGenerator = Depends(get_question_generator),
):
    interview = generator.get_interview(
        auth_id,
        interview_id,
        require_owner=_reads_require_owner(),
    )
    return interview.to_payload()
