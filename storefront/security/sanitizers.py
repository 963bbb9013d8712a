"""
Input Sanitization Module

SECURITY: Best-effort cleanup of untrusted admin form input.

Every sanitizer is a total function: it accepts any value and returns a
safe string, never raising. Absent or wrong-typed input becomes "".

Sanitization transforms input so it can be stored and displayed;
detect_attack() is the separate deny-by-pattern gate. Callers must reject a
submission when detect_attack() fires instead of silently storing the
sanitized value.

The attack patterns are a blocklist. They are defense in depth for the admin
form, not a replacement for parameterized queries and output encoding in the
backend that stores and renders the data.
"""

import math
import re
from decimal import Decimal
from typing import Any, Iterable, Pattern

from storefront.core.constants import (
    MAX_TEXT_LENGTH,
    MAX_NAME_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_PRICE_LENGTH,
    MAX_URL_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_CATEGORY_LENGTH,
)


ANGLE_BRACKETS = re.compile(r'[<>]')
UNSAFE_NAME_CHARS = re.compile(r'[<>"\'`;\\]')
JAVASCRIPT_PROTOCOL = re.compile(r'javascript:', re.IGNORECASE)
DATA_PROTOCOL = re.compile(r'data:', re.IGNORECASE)
DATA_HTML_PROTOCOL = re.compile(r'data:text/html', re.IGNORECASE)
EVENT_HANDLER = re.compile(r'on\w+=', re.IGNORECASE)

# Whole blocks, non-greedy; an unclosed opening tag swallows the rest of the input
SCRIPT_BLOCK = re.compile(r'<script\b.*?(?:</script\s*>|\Z)', re.IGNORECASE | re.DOTALL)
IFRAME_BLOCK = re.compile(r'<iframe\b.*?(?:</iframe\s*>|\Z)', re.IGNORECASE | re.DOTALL)

PRICE_DISALLOWED = re.compile(r'[^0-9.]')

ALLOWED_URL_SCHEME = re.compile(r'^https?://', re.IGNORECASE)
DANGEROUS_URL_SCHEME = re.compile(r'^(javascript|data|vbscript):', re.IGNORECASE)

ATTACK_PATTERNS = [
    re.compile(r'<script', re.IGNORECASE),
    re.compile(r'javascript:', re.IGNORECASE),
    re.compile(r'on\w+\s*=', re.IGNORECASE),
    re.compile(r'union\s+select', re.IGNORECASE),
    re.compile(r';\s*drop\s+table', re.IGNORECASE),
    re.compile(r';\s*delete\s+from', re.IGNORECASE),
    re.compile(r"'\s*or\s+'1'\s*=\s*'1", re.IGNORECASE),
    re.compile(r'--\s*$'),
    re.compile(r'/\*.*\*/'),
    re.compile(r'\$\{.*\}'),
    re.compile(r'\{\{.*\}\}'),
]


def _strip_patterns(value: str, patterns: Iterable[Pattern]) -> str:
    """
    Remove every pattern until none matches any more.

    A single pass is not enough: removing 'javascript:' from
    'javajavascript:script:' leaves 'javascript:' behind.
    """
    patterns = list(patterns)
    while True:
        cleaned = value
        for pattern in patterns:
            cleaned = pattern.sub('', cleaned)
        if cleaned == value:
            return cleaned
        value = cleaned


def _finish(value: str, max_length: int) -> str:
    """Trim, truncate, and trim again so the cut never leaves trailing space."""
    return value.strip()[:max_length].strip()


def _clean(value: str, patterns: Iterable[Pattern], max_length: int) -> str:
    """
    Strip patterns and truncate until the value stops changing.

    The cut can complete a pattern: '<scriptx>' cut after '<script' matches
    SCRIPT_BLOCK, so the strip runs again on the truncated value.
    """
    patterns = list(patterns)
    while True:
        cleaned = _finish(_strip_patterns(value, patterns), max_length)
        if cleaned == value:
            return cleaned
        value = cleaned


def sanitize_text(value: Any) -> str:
    """
    Sanitize free text for display.

    Removes angle brackets, the javascript: and data: protocols and inline
    event handlers (onclick= ...), then trims and caps at 1000 characters.

    Example:
        >>> sanitize_text('  <b>hello</b> onclick=x ')
        'bhello/b x'
    """
    if not isinstance(value, str) or not value:
        return ""

    return _clean(
        value, (ANGLE_BRACKETS, JAVASCRIPT_PROTOCOL, EVENT_HANDLER, DATA_PROTOCOL), MAX_TEXT_LENGTH
    )


def sanitize_name(value: Any) -> str:
    """
    Sanitize a product name.

    Stricter than sanitize_text(): also drops quotes, backticks, semicolons
    and backslashes. Capped at 200 characters.

    Example:
        >>> sanitize_name('Shoe"; DROP')
        'Shoe DROP'
    """
    if not isinstance(value, str) or not value:
        return ""

    return _clean(
        value, (UNSAFE_NAME_CHARS, JAVASCRIPT_PROTOCOL, EVENT_HANDLER), MAX_NAME_LENGTH
    )


def sanitize_description(value: Any) -> str:
    """
    Sanitize a product description.

    Formatting markup is allowed, but <script> and <iframe> blocks are removed
    together with their content, as are the javascript: and data:text/html
    protocols and inline event handlers. Capped at 5000 characters.

    Example:
        >>> sanitize_description('<p>Nice</p><script>alert(1)</script>')
        '<p>Nice</p>'
    """
    if not isinstance(value, str) or not value:
        return ""

    return _clean(
        value,
        (SCRIPT_BLOCK, IFRAME_BLOCK, JAVASCRIPT_PROTOCOL, EVENT_HANDLER, DATA_HTML_PROTOCOL),
        MAX_DESCRIPTION_LENGTH,
    )


def _format_number(value: Any) -> str:
    """
    Positional notation for a number; str() would give '1e-05' for 0.00001.

    Non-finite floats give "".
    """
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        return format(Decimal(repr(value)), 'f')
    return str(value)


def sanitize_price(value: Any) -> str:
    """
    Reduce a price to digits and a single decimal point.

    Everything after the first dot is folded into the fractional part, and
    the result is capped at 10 characters. Numbers are accepted as well as
    strings and are written out without an exponent; a number whose integer
    part does not fit in 10 digits, or that is not finite, gives "".
    Anything else gives "".

    Example:
        >>> sanitize_price('12.34.56')
        '12.3456'
        >>> sanitize_price('abc99.9')
        '99.9'
    """
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return ""
    if value == "":
        return ""

    if isinstance(value, str):
        text = value
    else:
        text = _format_number(value)
        # Truncating the integer part would change the amount
        if len(text.lstrip('-').split('.')[0]) > MAX_PRICE_LENGTH:
            return ""

    cleaned = PRICE_DISALLOWED.sub('', text)
    parts = cleaned.split('.')
    if len(parts) > 2:
        cleaned = parts[0] + '.' + ''.join(parts[1:])

    return cleaned[:MAX_PRICE_LENGTH]


def sanitize_url(value: Any) -> str:
    """
    Accept only http:// and https:// URLs.

    Anything else, including javascript:, data: and vbscript: URLs and
    plain text, gives "". Accepted URLs are trimmed and capped at 2000
    characters.

    Example:
        >>> sanitize_url('https://example.com/pay')
        'https://example.com/pay'
        >>> sanitize_url('javascript:alert(1)')
        ''
    """
    if not isinstance(value, str) or not value:
        return ""

    trimmed = value.strip()
    if not ALLOWED_URL_SCHEME.match(trimmed):
        return ""
    if DANGEROUS_URL_SCHEME.match(trimmed):
        return ""

    return trimmed[:MAX_URL_LENGTH].strip()


def sanitize_email(value: Any) -> str:
    """
    Normalize an email address: lower-case, unsafe characters removed,
    trimmed, capped at 254 characters.
    """
    if not isinstance(value, str) or not value:
        return ""

    cleaned = UNSAFE_NAME_CHARS.sub('', value.lower())
    return _finish(cleaned, MAX_EMAIL_LENGTH)


def sanitize_category(value: Any) -> str:
    """Sanitize a product category: unsafe characters removed, max 100 characters."""
    if not isinstance(value, str) or not value:
        return ""

    cleaned = UNSAFE_NAME_CHARS.sub('', value)
    return _finish(cleaned, MAX_CATEGORY_LENGTH)


def detect_attack(value: Any) -> bool:
    """
    Check raw (unsanitized) input for common attack signatures.

    Detects script tags, the javascript: protocol, inline event handlers,
    UNION SELECT, '; DROP TABLE' / '; DELETE FROM', the classic
    ' OR '1'='1 injection, trailing SQL comments, block comments and template
    interpolation (${...}, {{...}}).

    Returns:
        True if any pattern matches. Non-string input is never an attack.

    Example:
        >>> detect_attack("admin' OR '1'='1")
        True
        >>> detect_attack('Blue running shoe')
        False
    """
    if not isinstance(value, str) or not value:
        return False

    return any(pattern.search(value) for pattern in ATTACK_PATTERNS)


def preview_for_logging(value: Any, max_length: int = 50) -> str:
    """
    Shorten suspicious input before it is written to the logs.

    Never log raw attack payloads in full: they can target log viewers too.
    """
    if not isinstance(value, str) or not value:
        return ""

    preview = ANGLE_BRACKETS.sub('', value)[:max_length]
    if len(value) > max_length:
        preview += "... (truncated)"
    return preview
