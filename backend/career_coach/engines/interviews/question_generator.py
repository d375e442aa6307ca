"""Interview question generation: save a job posting, then generate questions.

Dev notes:
- Each ``generate_questions`` call walks
  Idle -> Authorizing -> Loading -> Prompting -> Completing -> Parsing
  -> Persisting -> Done, or stops in Failed with the error that caused it.
- Questions are written once, as a complete validated list. A failure at any
  step leaves the stored interview exactly as it was.
- Re-running for the same interview replaces the question list.
- Runs for the same interview id are serialized inside this process; across
  processes the last write wins.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Optional, Protocol

from ...db.interview_store import InterviewStore
from .errors import (
    InterviewNotFound,
    InterviewPipelineError,
    MalformedOutput,
    Unauthorized,
    UserNotFound,
)
from .models import Interview, Question, User
from .prompt_builder import build_question_prompt
from .response_parser import parse_questions

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> str: ...


class GenerationState(str, Enum):
    IDLE = "Idle"
    AUTHORIZING = "Authorizing"
    LOADING = "Loading"
    PROMPTING = "Prompting"
    COMPLETING = "Completing"
    PARSING = "Parsing"
    PERSISTING = "Persisting"
    DONE = "Done"
    FAILED = "Failed"


@dataclass
class GenerationRun:
    interview_id: str
    state: GenerationState = GenerationState.IDLE
    history: list[GenerationState] = field(default_factory=lambda: [GenerationState.IDLE])
    failure: Optional[InterviewPipelineError] = None

    def advance(self, state: GenerationState) -> None:
        logger.debug("Interview %s: %s -> %s", self.interview_id, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def fail(self, error: InterviewPipelineError) -> None:
        error.failed_state = self.state.value
        self.failure = error
        logger.warning(
            "Question generation for interview %s failed in %s (%s): %s",
            self.interview_id,
            self.state.value,
            error.kind.value,
            error.message,
        )
        self.advance(GenerationState.FAILED)


@dataclass
class _InterviewLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    waiters: int = 0


_interview_locks: dict[str, _InterviewLock] = {}


@asynccontextmanager
async def _interview_lock(interview_id: str) -> AsyncIterator[None]:
    entry = _interview_locks.setdefault(interview_id, _InterviewLock())
    entry.waiters += 1
    try:
        async with entry.lock:
            yield
    finally:
        entry.waiters -= 1
        if entry.waiters == 0:
            _interview_locks.pop(interview_id, None)


class QuestionGenerator:
    def __init__(self, store: InterviewStore, client: CompletionClient) -> None:
        self.store = store
        self.client = client
        self.last_run: Optional[GenerationRun] = None

    def _resolve_user(self, auth_id: Optional[str]) -> User:
        if not auth_id or not str(auth_id).strip():
            raise Unauthorized("Unauthorized")
        user = self.store.find_user_by_auth_id(str(auth_id).strip())
        if user is None:
            raise UserNotFound("User not found")
        return user

    def save_job_to_interview(
        self,
        auth_id: Optional[str],
        job_title: str,
        company_name: str,
        job_description: str,
    ) -> dict[str, Any]:
        """Persist job details as a fresh interview with no questions yet."""
        user = self._resolve_user(auth_id)
        interview = self.store.create_interview(
            owner_id=user.id,
            job_title=job_title,
            company_name=company_name,
            job_description=job_description,
        )
        return {
            "interview_id": interview.id,
            "message": "Job details saved successfully!",
        }

    def get_interview(self, auth_id: Optional[str], interview_id: str, *, require_owner: bool = True) -> Interview:
        """Read one interview; owner scoping is the caller's choice."""
        user = self._resolve_user(auth_id)
        interview = self.store.find_interview_by_id(interview_id)
        if interview is None:
            raise InterviewNotFound(f"Interview {interview_id!r} not found")
        if require_owner and interview.user_id != user.id:
            raise Unauthorized("Interview not found or access denied")
        return interview

    def list_interviews(self, auth_id: Optional[str]) -> list[Interview]:
        user = self._resolve_user(auth_id)
        return self.store.list_interviews_for_user(user.id)

    async def generate_questions(self, auth_id: Optional[str], interview_id: str) -> list[Question]:
        run = GenerationRun(interview_id=interview_id)
        self.last_run = run
        async with _interview_lock(interview_id):
            try:
                return await self._run(run, auth_id)
            except InterviewPipelineError as exc:
                run.fail(exc)
                raise

    async def _run(self, run: GenerationRun, auth_id: Optional[str]) -> list[Question]:
        run.advance(GenerationState.AUTHORIZING)
        user = self._resolve_user(auth_id)

        run.advance(GenerationState.LOADING)
        interview = self.store.find_interview_by_id(run.interview_id)
        if interview is None:
            raise InterviewNotFound(f"Interview {run.interview_id!r} not found")
        if interview.user_id != user.id:
            raise Unauthorized("Interview belongs to another user")

        run.advance(GenerationState.PROMPTING)
        prompt = build_question_prompt(interview, user)

        run.advance(GenerationState.COMPLETING)
        raw = await self.client.complete(prompt)

        run.advance(GenerationState.PARSING)
        try:
            questions = parse_questions(raw)
        except MalformedOutput as exc:
            logger.error("Failed to parse Gemini question output for interview %s: %r", run.interview_id, exc.raw_text)
            raise

        run.advance(GenerationState.PERSISTING)
        self.store.update_interview_questions(run.interview_id, questions)

        run.advance(GenerationState.DONE)
        logger.info(
            "Generated %d questions for interview %s (%s at %s)",
            len(questions),
            run.interview_id,
            interview.job_title,
            interview.company_name,
        )
        return questions
