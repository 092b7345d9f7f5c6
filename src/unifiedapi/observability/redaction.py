"""Redaction helpers for safe logging. Request-derived data must pass through these."""

import re
from typing import Any

# Patterns that should never appear in logs
_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_IPV4_PATTERN = re.compile(r"\b(\d{1,3})\.(\d{1,3})\.\d{1,3}\.\d{1,3}\b")
_IPV6_PATTERN = re.compile(r"\b(?:[0-9a-fA-F]{1,4}:){2,7}[0-9a-fA-F]{0,4}\b")

_REDACTED = "[REDACTED]"


def redact_string(value: str) -> str:
    """Mask e-mail addresses and IP addresses (IPv4 keeps its /16 prefix)."""
    result = _EMAIL_PATTERN.sub(_REDACTED, value)
    result = _IPV4_PATTERN.sub(lambda m: f"{m.group(1)}.{m.group(2)}.x.x", result)
    result = _IPV6_PATTERN.sub(_REDACTED, result)
    return result


def redact_name(value: str | None) -> str:
    """Reduce a personal name to its initial and length, e.g. "J(4)"."""
    if not value:
        return "null"
    value = value.strip()
    if not value:
        return "empty"
    return f"{value[0].upper()}({len(value)})"


def redact_value(value: Any) -> str:
    """Redact any value for safe logging. Returns string representation."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, dict):
        # Structure only
        return f"dict(keys={list(value.keys())})"
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"list(len={len(value)})"
    return f"<{type(value).__name__}>"


def safe_log_context(**kwargs: Any) -> dict[str, str]:
    """Build a context dict safe for logging. All values are redacted."""
    return {k: redact_value(v) for k, v in kwargs.items()}
