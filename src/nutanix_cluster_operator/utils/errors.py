"""Error sanitization utilities to prevent information leakage."""

import re

# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"username[:=\s]+([^\s,;\)\"']+)",
    r"password[:=\s]+([^\s,;\)\"']+)",
    r"authorization[:\s]+(basic|bearer)\s+([A-Za-z0-9/+=\.\-_]+)",
]


def _redact_value(match: re.Match[str]) -> str:
    # The secret is always the last capture group of the pattern
    group = match.lastindex or 1
    text = match.group(0)
    start = match.start(group) - match.start(0)
    end = match.end(group) - match.start(0)
    return f"{text[:start]}[REDACTED]{text[end:]}"


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, _redact_value, sanitized, flags=re.IGNORECASE)

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))
