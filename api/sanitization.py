"""
Input sanitization utilities for EcoPack API endpoints.
Protects the prompt builder and the profile store from malformed or oversized input.
"""

import re
import html
from typing import Any, Dict, Optional
import logging

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def sanitize_string(input_str: Any, max_length: Optional[int] = None, escape_html: bool = True) -> str:
    """
    Sanitize a string input by:
    1. Stripping leading/trailing whitespace
    2. HTML escaping (unless the text is only ever sent to the model)
    3. Removing control characters
    4. Truncating to max_length if specified

    Args:
        input_str: The input to sanitize; None becomes "" and non-strings are stringified
        max_length: Optional maximum length for truncation
        escape_html: Whether to HTML-escape the text

    Returns:
        Sanitized string
    """
    if not isinstance(input_str, str):
        if input_str is None:
            return ""
        input_str = str(input_str)

    sanitized = input_str.strip()

    if escape_html:
        sanitized = html.escape(sanitized)

    # Remove control characters (except tab, newline, carriage return)
    sanitized = CONTROL_CHARS.sub('', sanitized)

    if max_length and len(sanitized) > max_length:
        logging.warning(f"Input truncated from {len(sanitized)} to {max_length} characters")
        sanitized = sanitized[:max_length]

    return sanitized


def sanitize_user_id(user_id: Any) -> str:
    """
    Restrict user ids to characters that are safe inside storage keys.

    Args:
        user_id: Raw user id from the URL or request body

    Returns:
        Sanitized user id (alphanumerics, underscores, hyphens and dots)
    """
    if not user_id:
        return ""
    user_id = sanitize_string(user_id, escape_html=False)
    user_id = re.sub(r'[^a-zA-Z0-9_.-]', '', user_id)
    if len(user_id) > 128:
        user_id = user_id[:128]
        logging.warning(f"User id truncated to 128 characters: {user_id}")
    return user_id


def sanitize_dict(data: Dict[str, Any], field_rules: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sanitize a dictionary based on field-specific rules.

    Fields with a callable rule are passed through it; other string fields get
    basic string sanitization; everything else is kept as-is.
    """
    sanitized = {}

    for field, value in data.items():
        rule = field_rules.get(field)
        if callable(rule):
            sanitized[field] = rule(value)
        elif isinstance(value, str):
            sanitized[field] = sanitize_string(value)
        else:
            sanitized[field] = value

    return sanitized


# Text sent to the model is not HTML-escaped; it never reaches a browser unescaped.
ANALYZE_RULES = {
    'description': lambda x: sanitize_string(x, 2000, escape_html=False),
    'location': lambda x: sanitize_string(x, 200, escape_html=False),
    'userId': sanitize_user_id,
}

CHAT_RULES = {
    'message': lambda x: sanitize_string(x, 1000, escape_html=False),
}

QUIZ_RULES = {
    'difficulty': lambda x: sanitize_string(x, 20, escape_html=False).lower(),
    'category': lambda x: sanitize_string(x, 100, escape_html=False),
}

SCAN_RULES = {
    'description': lambda x: sanitize_string(x, 2000),
    'location': lambda x: sanitize_string(x, 200),
    'category': lambda x: sanitize_string(x, 100),
}

BADGE_RULES = {
    'id': lambda x: sanitize_string(x, 64),
    'name': lambda x: sanitize_string(x, 100),
    'emoji': lambda x: sanitize_string(x, 16),
    'description': lambda x: sanitize_string(x, 300),
}
