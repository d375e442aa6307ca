"""SQLite-backed store for users and interview records."""

import json
import logging
import sqlite3
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from ..engines.interviews.errors import PersistenceError
from ..engines.interviews.models import Interview, Question, QuestionCategory, User

logger = logging.getLogger(__name__)


def _safe_json_parse(raw: Any, fallback: Any) -> Any:
    if isinstance(raw, (dict, list)):
        return raw
    if not isinstance(raw, str):
        return fallback
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return fallback


def _ensure_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    result: list[str] = []
    for item in value:
        if isinstance(item, str):
            cleaned = item.strip()
            if cleaned:
                result.append(cleaned)
    return result


def _questions_from_json(raw: Any, interview_id: str) -> list[Question]:
    items = _safe_json_parse(raw, [])
    if not isinstance(items, list):
        logger.warning("Interview %s has a non-list questions column; treating as empty", interview_id)
        return []
    questions: list[Question] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            category = QuestionCategory(item.get("type"))
        except ValueError:
            logger.warning("Interview %s has a question with unknown type %r", interview_id, item.get("type"))
            continue
        text = item.get("question")
        if isinstance(text, str) and text.strip():
            questions.append(Question(question=text, category=category))
    return questions


def _row_to_user(row: sqlite3.Row) -> User:
    data = dict(row)
    return User(
        id=data["id"],
        auth_id=data["auth_id"],
        skills=_ensure_str_list(_safe_json_parse(data.get("skills_json"), [])),
        experience=max(0, int(data.get("experience") or 0)),
        industry=data.get("industry"),
        bio=data.get("bio"),
    )


def _row_to_interview(row: sqlite3.Row) -> Interview:
    data = dict(row)
    return Interview(
        id=data["id"],
        user_id=data["user_id"],
        job_title=data["job_title"],
        company_name=data["company_name"],
        job_description=data["job_description"],
        interview_type=data.get("interview_type") or "General",
        duration=int(data.get("duration") or 30),
        questions=_questions_from_json(data.get("questions_json"), data["id"]),
        created_at=data.get("created_at"),
    )


class InterviewStore:
    """Create/find/update operations on ``users`` and ``interviews``.

    Any ``sqlite3.Error`` is rolled back and re-raised as ``PersistenceError``.
    Ownership checks are the caller's job.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _fail(self, action: str, exc: sqlite3.Error) -> PersistenceError:
        self._conn.rollback()
        logger.exception("Failed to %s", action)
        return PersistenceError(f"Failed to {action}: {exc}")

    # ── Users ─────────────────────────────────────────────────────────

    def find_user_by_auth_id(self, auth_id: str) -> Optional[User]:
        try:
            row = self._conn.execute(
                "SELECT * FROM users WHERE auth_id = ?",
                (auth_id,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise self._fail("load user", exc) from exc
        return _row_to_user(row) if row is not None else None

    def upsert_user(
        self,
        auth_id: str,
        *,
        skills: list[str] | None = None,
        experience: int = 0,
        industry: str | None = None,
        bio: str | None = None,
    ) -> User:
        if experience < 0:
            raise ValueError("experience must be >= 0")
        now = datetime.utcnow().isoformat()
        try:
            self._conn.execute(
                """
                INSERT INTO users (id, auth_id, skills_json, experience, industry, bio, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(auth_id) DO UPDATE SET
                  skills_json = excluded.skills_json,
                  experience = excluded.experience,
                  industry = excluded.industry,
                  bio = excluded.bio,
                  updated_at = excluded.updated_at
                """,
                (
                    f"user-{uuid4().hex[:12]}",
                    auth_id,
                    json.dumps(_ensure_str_list(skills or [])),
                    experience,
                    industry,
                    bio,
                    now,
                    now,
                ),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise self._fail("save user profile", exc) from exc

        user = self.find_user_by_auth_id(auth_id)
        if user is None:
            raise PersistenceError(f"User {auth_id!r} missing after save")
        return user

    # ── Interviews ────────────────────────────────────────────────────

    def create_interview(
        self,
        owner_id: str,
        job_title: str,
        company_name: str,
        job_description: str,
    ) -> Interview:
        interview_id = f"interview-{uuid4().hex[:12]}"
        now = datetime.utcnow().isoformat()
        try:
            self._conn.execute(
                """INSERT INTO interviews
                   (id, user_id, job_title, company_name, job_description,
                    interview_type, duration, questions_json, created_at)
                   VALUES (?, ?, ?, ?, ?, 'General', 30, '[]', ?)""",
                (interview_id, owner_id, job_title, company_name, job_description, now),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise self._fail("create interview", exc) from exc

        logger.info("Created interview %s for user %s", interview_id, owner_id)
        return Interview(
            id=interview_id,
            user_id=owner_id,
            job_title=job_title,
            company_name=company_name,
            job_description=job_description,
            created_at=now,
        )

    def find_interview_by_id(self, interview_id: str) -> Optional[Interview]:
        try:
            row = self._conn.execute(
                "SELECT * FROM interviews WHERE id = ?",
                (interview_id,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise self._fail("load interview", exc) from exc
        return _row_to_interview(row) if row is not None else None

    def list_interviews_for_user(self, user_id: str) -> list[Interview]:
        try:
            rows = self._conn.execute(
                "SELECT * FROM interviews WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise self._fail("list interviews", exc) from exc
        return [_row_to_interview(row) for row in rows]

    def update_interview_questions(self, interview_id: str, questions: list[Question]) -> Interview:
        """Replace the whole question list in one statement."""
        payload = json.dumps([q.to_dict() for q in questions])
        try:
            cursor = self._conn.execute(
                "UPDATE interviews SET questions_json = ? WHERE id = ?",
                (payload, interview_id),
            )
            if cursor.rowcount == 0:
                self._conn.rollback()
                raise PersistenceError(f"Interview {interview_id!r} disappeared before questions were saved")
            self._conn.commit()
        except sqlite3.Error as exc:
            raise self._fail("save interview questions", exc) from exc

        interview = self.find_interview_by_id(interview_id)
        if interview is None:
            raise PersistenceError(f"Interview {interview_id!r} missing after update")
        return interview
