"""Thin wrapper around the Google Generative AI SDK (Gemini).

The client is built from an explicit ``GeminiConfig`` rather than ambient
SDK state, and exposes a single ``complete(prompt) -> str`` call that either
returns non-blank text or raises ``ServiceUnavailable`` / ``EmptyResponse``.
No retries happen here.
"""

import asyncio
import logging
import os
import sqlite3
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from google.api_core.exceptions import GoogleAPIError

from ..db.database import resolve_db_path
from ..engines.interviews.errors import EmptyResponse, ServiceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_TIMEOUT_SECONDS = 60.0


def _read_api_key_from_settings(db_path: Path) -> str | None:
    if not db_path.exists():
        return None
    conn: sqlite3.Connection | None = None
    try:
        conn = sqlite3.connect(db_path)
        row = conn.execute(
            "SELECT llm_provider, llm_api_key FROM settings WHERE id = 1"
        ).fetchone()
        if row is None:
            return None

        provider, key = row
        provider_value = str(provider or "").strip().lower()
        key_value = str(key or "").strip()
        if provider_value and provider_value != "gemini":
            return None
        return key_value or None
    except sqlite3.Error:
        logger.warning("Could not read Gemini API key from settings table at %s", db_path)
        return None
    finally:
        if conn is not None:
            conn.close()


def _resolve_timeout() -> float:
    raw = os.environ.get("GEMINI_TIMEOUT_SECONDS", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        parsed = float(raw)
    except ValueError:
        logger.warning("Invalid GEMINI_TIMEOUT_SECONDS value: %s", raw)
        return DEFAULT_TIMEOUT_SECONDS
    return parsed if parsed > 0 else DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class GeminiConfig:
    api_key: Optional[str]
    model_name: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, db_path: str | Path | None = None) -> "GeminiConfig":
        """Read the key from ``GEMINI_API_KEY``, falling back to the settings row."""
        api_key = os.environ.get("GEMINI_API_KEY", "").strip() or None
        if api_key is None:
            api_key = _read_api_key_from_settings(Path(db_path) if db_path else resolve_db_path())
        return cls(
            api_key=api_key,
            model_name=os.environ.get("GEMINI_MODEL", "").strip() or DEFAULT_MODEL,
            timeout_seconds=_resolve_timeout(),
        )


# ── Response shapes ───────────────────────────────────────────────────────


class ResponseShape(str, Enum):
    DIRECT_TEXT = "direct_text"
    CANDIDATE_PARTS = "candidate_parts"


def _read_direct_text(response: Any) -> str | None:
    # The SDK's ``.text`` accessor raises ValueError when the candidate has no parts
    # (for example when generation was blocked).
    try:
        text = response.text
    except (AttributeError, ValueError):
        return None
    return text if isinstance(text, str) and text.strip() else None


def _read_candidate_parts(response: Any) -> str | None:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    chunks = [part.text for part in parts if isinstance(getattr(part, "text", None), str)]
    text = "".join(chunks)
    return text if text.strip() else None


_RESPONSE_READERS: tuple[tuple[ResponseShape, Callable[[Any], str | None]], ...] = (
    (ResponseShape.DIRECT_TEXT, _read_direct_text),
    (ResponseShape.CANDIDATE_PARTS, _read_candidate_parts),
)


def extract_response_text(response: Any) -> str:
    for shape, reader in _RESPONSE_READERS:
        text = reader(response)
        if text is not None:
            logger.debug("Read Gemini response via %s", shape.value)
            return text
    raise EmptyResponse("Gemini returned no extractable text")


# ── Client ────────────────────────────────────────────────────────────────


class GeminiCompletionClient:
    """Completion client bound to one model.

    ``model`` may be supplied directly (anything with an async
    ``generate_content_async(prompt)``); otherwise a ``GenerativeModel`` is
    built lazily from the config on first use.
    """

    def __init__(self, config: GeminiConfig, model: Any = None) -> None:
        self.config = config
        self._model = model

    def _get_model(self) -> Any:
        if self._model is not None:
            return self._model
        if not self.config.api_key:
            logger.warning(
                "GEMINI_API_KEY is not set; question generation is unavailable. "
                "Set the key in your environment or in Settings."
            )
            raise ServiceUnavailable("Gemini API key is not configured")

        import google.generativeai as genai  # type: ignore[import-untyped]

        # The SDK has no per-model key; configure() sets it for the whole process.
        genai.configure(api_key=self.config.api_key)
        self._model = genai.GenerativeModel(self.config.model_name)
        logger.info("Gemini client initialised (model=%s)", self.config.model_name)
        return self._model

    async def complete(self, prompt: str) -> str:
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValueError("prompt must be a non-empty string")

        model = self._get_model()
        try:
            response = await asyncio.wait_for(
                model.generate_content_async(prompt),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise ServiceUnavailable(
                f"Gemini did not respond within {self.config.timeout_seconds:g}s"
            ) from exc
        except GoogleAPIError as exc:
            raise ServiceUnavailable(f"Gemini request failed: {exc}") from exc
        except OSError as exc:
            raise ServiceUnavailable(f"Network error talking to Gemini: {exc}") from exc

        return extract_response_text(response)


_client: GeminiCompletionClient | None = None  # module-level cache


def get_gemini_client() -> GeminiCompletionClient:
    """Return a client for the current configuration, reusing it while the config is unchanged."""
    global _client  # noqa: PLW0603

    config = GeminiConfig.from_env()
    if _client is None or _client.config != config:
        _client = GeminiCompletionClient(config)
    return _client
