import re

_CONTROL_CHARS_RE = re.compile(r"[\x01-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_text(text: str) -> str:
    """Drop NUL bytes, then collapse control characters and whitespace runs to single spaces."""
    without_controls = _CONTROL_CHARS_RE.sub(" ", text.replace("\x00", ""))
    return _WHITESPACE_RE.sub(" ", without_controls).strip()
