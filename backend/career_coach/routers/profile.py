from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..db.interview_store import InterviewStore
from ..deps import get_auth_id, get_store
from ..engines.interviews.errors import Unauthorized, UserNotFound
from ..engines.interviews.models import User

router = APIRouter(prefix="", tags=["profile"])


class UpdateProfileRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    industry: Optional[str] = None
    experience: int = Field(default=0, ge=0, le=50)
    skills: list[str] = Field(default_factory=list)
    bio: Optional[str] = Field(default=None, max_length=500)

    @field_validator("skills", mode="before")
    @classmethod
    def _split_skills(cls, value: Any) -> Any:
        # The onboarding form sends skills as one comma-separated string.
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


def _require_auth(auth_id: Optional[str]) -> str:
    if not auth_id:
        raise Unauthorized("Unauthorized")
    return auth_id


def _user_payload(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "authId": user.auth_id,
        "industry": user.industry,
        "experience": user.experience,
        "skills": user.skills,
        "bio": user.bio,
    }


@router.get("/profile")
def get_profile(
    auth_id: Optional[str] = Depends(get_auth_id),
    store: InterviewStore = Depends(get_store),
):
    user = store.find_user_by_auth_id(_require_auth(auth_id))
    if user is None:
        raise UserNotFound("User not found")
    return _user_payload(user)


@router.put("/profile")
def update_profile(
    payload: UpdateProfileRequest,
    auth_id: Optional[str] = Depends(get_auth_id),
    store: InterviewStore = Depends(get_store),
):
    """Create or update the caller's onboarding profile."""
    user = store.upsert_user(
        _require_auth(auth_id),
        skills=payload.skills,
        experience=payload.experience,
        industry=payload.industry or None,
        bio=payload.bio or None,
    )
    return _user_payload(user)
