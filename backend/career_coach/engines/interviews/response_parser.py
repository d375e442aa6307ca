"""Turns raw model text into a validated, ordered question list.

Models routinely wrap JSON in Markdown code fences even when told not to, so
fences at either end are stripped before decoding. Validation is strict: the
first bad element fails the whole parse and nothing partial is returned.
"""

import json
import re

from .errors import MalformedOutput
from .models import CATEGORY_LABELS, Question, QuestionCategory

_LEADING_FENCE_RE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\n?[ \t]*```$")


def strip_code_fences(raw_text: str) -> str:
    text = (raw_text or "").strip()
    text = _LEADING_FENCE_RE.sub("", text, count=1)
    text = _TRAILING_FENCE_RE.sub("", text, count=1)
    return text.strip()


def parse_questions(raw_text: str) -> list[Question]:
    cleaned = strip_code_fences(raw_text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedOutput(f"Model output is not valid JSON: {exc.msg}", raw_text) from exc
    except RecursionError as exc:
        raise MalformedOutput("Model output is nested too deeply to decode", raw_text) from exc

    if not isinstance(payload, list):
        raise MalformedOutput("Model output is not a JSON array", raw_text)
    if not payload:
        raise MalformedOutput("Model output contains no questions", raw_text)

    questions: list[Question] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise MalformedOutput(f"Element {index} is not an object", raw_text)
        text = item.get("question")
        if not isinstance(text, str) or not text.strip():
            raise MalformedOutput(f"Element {index} has no question text", raw_text)
        category = item.get("type")
        if category not in CATEGORY_LABELS:
            raise MalformedOutput(
                f"Element {index} has type {category!r}; expected one of {', '.join(CATEGORY_LABELS)}",
                raw_text,
            )
        questions.append(Question(question=text, category=QuestionCategory(category)))
    return questions


def serialize_questions(questions: list[Question]) -> str:
    """Encode questions in the stored ``[{"question", "type"}]`` form.

    ``parse_questions`` inverts this for any non-empty list. An empty list
    encodes to ``"[]"``, which is the "not generated yet" column value and
    does not parse back.
    """
    return json.dumps([q.to_dict() for q in questions])
