"""
Content filtering for user-written text.

A small word list and a few spam patterns. Good enough to catch the
obvious cases; anything subtler goes through reports.
"""

import re

MAX_MESSAGE_LENGTH = 5000

PROFANITY_LIST = [
    "fuck",
    "shit",
    "damn",
    "bitch",
    "ass",
    "hell",
    "bastard",
    "crap",
]

_PROFANITY_PATTERNS = [re.compile(rf"\b{word}\b", re.IGNORECASE) for word in PROFANITY_LIST]

SPAM_PATTERNS = [
    re.compile(r"\b(buy now|click here|limited time|act now)\b", re.IGNORECASE),
    re.compile(r"\b(viagra|cialis|pharmacy)\b", re.IGNORECASE),
    re.compile(r"https?://\S+"),
]

_SCRIPT_TAG = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_HTML_TAG = re.compile(r"<[^>]*>")


def contains_profanity(text: str) -> bool:
    return any(pattern.search(text) for pattern in _PROFANITY_PATTERNS)


def filter_profanity(text: str) -> str:
    """Replace each listed word with asterisks of the same length."""
    for pattern in _PROFANITY_PATTERNS:
        text = pattern.sub(lambda m: "*" * len(m.group(0)), text)
    return text


def is_spam(text: str) -> bool:
    return any(pattern.search(text) for pattern in SPAM_PATTERNS)


def validate_message_content(content: str | None) -> str | None:
    """Return the reason a message is rejected, or None."""
    if not content or not content.strip():
        return "Message cannot be empty"
    if len(content) > MAX_MESSAGE_LENGTH:
        return f"Message too long (max {MAX_MESSAGE_LENGTH} characters)"
    if is_spam(content):
        return "Message appears to be spam"
    return None


def sanitize_input(text: str) -> str:
    """Trim and strip script blocks and HTML tags."""
    text = _SCRIPT_TAG.sub("", text.strip())
    return _HTML_TAG.sub("", text)
