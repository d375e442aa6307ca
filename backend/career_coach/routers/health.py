import sqlite3
from datetime import datetime

from fastapi import APIRouter, Depends

from ..clients.gemini import GeminiConfig
from ..deps import db_conn

router = APIRouter()


@router.get("/health")
def health_check():
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}


@router.get("/ready")
def readiness_check(db: sqlite3.Connection = Depends(db_conn)):
    """Report whether the database answers and a Gemini key is configured."""
    try:
        db.execute("SELECT 1 FROM interviews LIMIT 1").fetchall()
        database_ok = True
    except sqlite3.Error:
        database_ok = False
    gemini_configured = bool(GeminiConfig.from_env().api_key)
    return {
        "ready": database_ok and gemini_configured,
        "database": database_ok,
        "gemini_configured": gemini_configured,
        "version": "0.1.0",
    }
