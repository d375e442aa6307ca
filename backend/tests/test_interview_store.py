import sqlite3
import sys
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from career_coach.db.database import get_db
from career_coach.db.interview_store import InterviewStore
from career_coach.db.schema import init_db
from career_coach.engines.interviews.errors import PersistenceError
from career_coach.engines.interviews.models import Question, QuestionCategory


@pytest.fixture
def store(tmp_path: Path):
    db_path = tmp_path / "career_coach.db"
    init_db(db_path)
    conn = get_db(db_path)
    try:
        yield InterviewStore(conn)
    finally:
        conn.close()


def test_upsert_user_creates_then_updates(store: InterviewStore):
    created = store.upsert_user("auth-001", skills=["Python", " ", "SQL"], experience=2, industry="tech-software")
    updated = store.upsert_user("auth-001", skills=["Go"], experience=4, bio="Backend engineer")

    assert updated.id == created.id
    assert created.skills == ["Python", "SQL"]
    assert updated.skills == ["Go"]
    assert updated.experience == 4
    assert updated.bio == "Backend engineer"
    assert store.find_user_by_auth_id("auth-001") == updated


def test_upsert_user_rejects_negative_experience(store: InterviewStore):
    with pytest.raises(ValueError):
        store.upsert_user("auth-001", experience=-1)


def test_find_user_by_unknown_auth_id_returns_none(store: InterviewStore):
    assert store.find_user_by_auth_id("nobody") is None


def test_create_interview_uses_defaults(store: InterviewStore):
    user = store.upsert_user("auth-001")

    created = store.create_interview(user.id, "Frontend Developer", "Acme", "Build UIs with React")
    loaded = store.find_interview_by_id(created.id)

    assert loaded is not None
    assert loaded.user_id == user.id
    assert loaded.job_title == "Frontend Developer"
    assert loaded.interview_type == "General"
    assert loaded.duration == 30
    assert loaded.questions == []


def test_create_interview_for_unknown_owner_is_persistence_error(store: InterviewStore):
    with pytest.raises(PersistenceError):
        store.create_interview("user-missing", "Frontend Developer", "Acme", "Build UIs with React")


def test_update_interview_questions_replaces_whole_list(store: InterviewStore):
    user = store.upsert_user("auth-001")
    interview = store.create_interview(user.id, "Frontend Developer", "Acme", "Build UIs with React")
    first = [
        Question("Explain closures", QuestionCategory.TECHNICAL),
        Question("Tell me about a deadline you missed", QuestionCategory.BEHAVIORAL),
    ]
    second = [Question("Design an autocomplete widget", QuestionCategory.PROBLEM_SOLVING)]

    store.update_interview_questions(interview.id, first)
    updated = store.update_interview_questions(interview.id, second)

    assert updated.questions == second
    assert store.find_interview_by_id(interview.id).questions == second


def test_update_missing_interview_is_persistence_error(store: InterviewStore):
    with pytest.raises(PersistenceError):
        store.update_interview_questions("interview-missing", [Question("q", QuestionCategory.TECHNICAL)])


def test_list_interviews_is_scoped_to_owner(store: InterviewStore):
    alice = store.upsert_user("auth-alice")
    bob = store.upsert_user("auth-bob")
    store.create_interview(alice.id, "Data Engineer", "Acme", "Build pipelines in Spark")
    store.create_interview(bob.id, "SRE", "Globex", "Keep the lights on")

    titles = [interview.job_title for interview in store.list_interviews_for_user(alice.id)]

    assert titles == ["Data Engineer"]


def test_sqlite_errors_surface_as_persistence_error(tmp_path: Path):
    conn = sqlite3.connect(tmp_path / "empty.db")
    try:
        with pytest.raises(PersistenceError):
            InterviewStore(conn).find_interview_by_id("interview-001")
    finally:
        conn.close()
