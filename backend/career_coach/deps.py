import sqlite3
from typing import Iterator, Optional

from fastapi import Depends, Header

from .clients.gemini import get_gemini_client
from .db.database import get_db
from .db.interview_store import InterviewStore
from .engines.interviews.question_generator import CompletionClient, QuestionGenerator


def db_conn() -> Iterator[sqlite3.Connection]:
    conn = get_db()
    try:
        yield conn
    finally:
        conn.close()


def get_auth_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Opaque user id set by the upstream auth proxy; absent for anonymous calls."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


def get_store(db: sqlite3.Connection = Depends(db_conn)) -> InterviewStore:
    return InterviewStore(db)


def get_completion_client() -> CompletionClient:
    return get_gemini_client()


def get_question_generator(
    store: InterviewStore = Depends(get_store),
    client: CompletionClient = Depends(get_completion_client),
) -> QuestionGenerator:
    return QuestionGenerator(store, client)
