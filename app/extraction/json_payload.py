import json
import re

from app.extraction.exceptions import ExternalServiceError

_FENCE_OPEN_RE = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding markdown code fence such as ```json ... ```."""
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_object(raw: str) -> dict[str, object]:
    """Parse a completion response that must be a JSON object.

    Raises:
        ExternalServiceError: on empty content, invalid JSON, or a non-object root.
    """
    cleaned = strip_code_fences(raw)
    if not cleaned:
        raise ExternalServiceError("Empty JSON response")
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ExternalServiceError(f"Invalid JSON response: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ExternalServiceError("JSON response must be an object")
    return parsed
