"""Masking of secrets and internal references in outbound text."""

import re

_REDACTIONS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b[A-Za-z0-9]{32,}\b"), "[REDACTED]"),
    (re.compile(r"\b[A-Za-z0-9]{20,}@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "[EMAIL_REDACTED]"),
    (re.compile(r"\b\d{3}-\d{2}-\d{4}\b"), "[SSN_REDACTED]"),
    (re.compile(r"\b(admin|internal|private)/\S+", re.IGNORECASE), "[PATH_REDACTED]"),
]


def redact_sensitive_content(content: str) -> str:
    """Replace key-like tokens, long e-mails, SSNs and internal paths."""
    for pattern, replacement in _REDACTIONS:
        content = pattern.sub(replacement, content)
    return content
