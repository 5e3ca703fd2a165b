"""
Value escaping policies

An escaper maps an arbitrary value to its output text. Plain templates use
text_escape (the value's string form, untouched); HTML templates use
html_escape, which replaces the five HTML-significant characters with
entities in a single left-to-right pass.

Example:
    >>> html_escape('<a href="x">B&B\\'s</a>')
    '&lt;a href=&quot;x&quot;&gt;B&amp;B&#39;s&lt;/a&gt;'
    >>> text_escape(None)
    ''
"""

import re
from typing import Any, Callable, Dict


Escaper = Callable[[Any], str]

HTML_ESCAPE: Dict[str, str] = {
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    "'": '&#39;',
}

_HTML_SPECIAL = re.compile(r'[&<>"\']')


def value_toText(value: Any) -> str:
    """Text form of a template value; None renders as empty string"""
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    return str(value)


def text_escape(value: Any) -> str:
    """Plain-text policy: no transformation beyond str()"""
    return value_toText(value)


def html_escape(value: Any) -> str:
    """
    Escape a value for inclusion in HTML

    Args:
        value: Any value; converted with value_toText() first

    Returns:
        Text with &, <, >, " and ' replaced by their entities
    """
    return _HTML_SPECIAL.sub(lambda m: HTML_ESCAPE[m.group(0)], value_toText(value))
