"""
Free-text cleaning shared by the input serializers.

HTML elements are stripped with bleach; everything else is kept
exactly as typed.  ``<`` that does not open a known HTML tag
(``Praxis <Nord>``, ``Blutdruck < 140``) and ``&`` are literal text, so
the stored value is plain text rather than HTML entities.
"""
import html
import re

import bleach
from bleach.html5lib_shim import HTML_TAGS

TAG_OPEN_RE = re.compile(r'<(/?)([A-Za-z][\w:-]*)')


def _escape_unknown_tag(m):
    if m.group(2).lower() in HTML_TAGS:
        return m.group(0)
    return '&lt;' + m.group(1) + m.group(2)


def clean_text(value) -> str:
    text = TAG_OPEN_RE.sub(_escape_unknown_tag, (value or '').strip())
    return html.unescape(bleach.clean(text, tags=set(), strip=True, strip_comments=True)).strip()
