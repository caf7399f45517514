"""Output grammar rendering and URI escaping.

A grammar is a space separated list of tokens: quoted tokens are copied
as literals, bare tokens are replaced by the field of that name.

>>> build_grammar("'urn:epc:id:sgtin:' companyprefix '.' itemref",
...               {'companyprefix': '0037000', 'itemref': '030241'},
...               'PURE_IDENTITY')
'urn:epc:id:sgtin:0037000.030241'
"""

import re

from .log import get_logger
from .model import PURE_IDENTITY, TAG_ENCODING
from .tdt_errors import MissingFieldError

logger = get_logger(__name__)

_TOKEN_RE = re.compile(r"'[^']*'|\S+")

# '%' goes first so escapes are not escaped twice
URI_ESCAPES = (
    ('%', '%25'),
    ('?', '%3F'),
    ('"', '%22'),
    ('&', '%26'),
    ('/', '%2F'),
    ('<', '%3C'),
    ('>', '%3E'),
    ('#', '%23'),
)
_UNESCAPES = {escaped: char for char, escaped in URI_ESCAPES}
_UNESCAPE_RE = re.compile('|'.join(escaped for _, escaped in URI_ESCAPES),
                          re.I)

URI_LEVELS = (TAG_ENCODING, PURE_IDENTITY)
URN_PREFIX = 'urn:epc:'


def uri_escape(value):
    for char, escaped in URI_ESCAPES:
        value = value.replace(char, escaped)
    return value


def uri_unescape(value):
    """Reverse uri_escape in a single pass.

    >>> uri_unescape('%2F%252F')
    '/%2F'
    """
    return _UNESCAPE_RE.sub(lambda m: _UNESCAPES[m.group(0).upper()], value)


def tokenize(grammar):
    return _TOKEN_RE.findall(grammar)


def build_grammar(grammar, context, level_type):
    """Render grammar with the field values held in context."""
    escape = level_type in URI_LEVELS
    parts = []
    for token in tokenize(grammar):
        if token.startswith("'") and token.endswith("'") and len(token) > 1:
            parts.append(token[1:-1])
            continue
        try:
            value = context[token]
        except KeyError:
            raise MissingFieldError(
                'No value for field {} required by grammar {!r}'.format(
                    token, grammar))
        parts.append(uri_escape(value) if escape else value)
    result = ''.join(parts)
    logger.debugfast('Grammar %r rendered as %r', grammar, result)
    return result
