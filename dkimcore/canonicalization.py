# This software is provided 'as-is', without any express or implied
# warranty.  In no event will the author be held liable for any damages
# arising from the use of this software.
#
# Permission is granted to anyone to use this software for any purpose,
# including commercial applications, and to alter it and redistribute it
# freely, subject to the following restrictions:
#
# 1. The origin of this software must not be misrepresented; you must not
#    claim that you wrote the original software. If you use this software
#    in a product, an acknowledgment in the product documentation would be
#    appreciated but is not required.
# 2. Altered source versions must be plainly marked as such, and must not be
#    misrepresented as being the original software.
# 3. This notice may not be removed or altered from any source distribution.
#
# Copyright (c) 2008 Greg Hewgill http://hewgill.com
#
# This has been modified from the original software.
# Copyright (c) 2011 William Grant <me@williamgrant.id.au>

__all__ = [
    'algorithms',
    'canonicalize_body_simple',
    'normalize_line_endings',
    'Simple',
    ]

import re


LINE_BREAK_RE = {
    bytes: re.compile(b"\r\n|\r|\n"),
    str: re.compile("\r\n|\r|\n"),
    }

# Matches start only at the first WSP of a run.
TRAILING_WSP_RE = {
    bytes: re.compile(b"(?<![\\x09\\x20])[\\x09\\x20]+(?=\r\n|\\Z)"),
    str: re.compile("(?<![\\x09\\x20])[\\x09\\x20]+(?=\r\n|\\Z)"),
    }

CRLF = {
    bytes: b"\r\n",
    str: "\r\n",
    }


def normalize_line_endings(message):
    """Rewrite every CRLF, bare CR and bare LF as CRLF.

    >>> normalize_line_endings(b'a\\nb\\rc\\r\\n')
    b'a\\r\\nb\\r\\nc\\r\\n'
    >>> normalize_line_endings('a\\n\\nb')
    'a\\r\\n\\r\\nb'
    """
    if not isinstance(message, str):
        message = bytes(message)
    kind = type(message)
    return LINE_BREAK_RE[kind].sub(CRLF[kind], message)


class Simple:
    """Class that represents the "simple" canonicalization algorithm."""

    name = b"simple"

    @staticmethod
    def canonicalize_headers(headers):
        # No changes to headers.
        return headers

    @staticmethod
    def canonicalize_body(body):
        body = normalize_line_endings(body)
        kind = type(body)
        crlf = CRLF[kind]
        # Remove all trailing WSP at end of lines.
        body = TRAILING_WSP_RE[kind].sub(crlf[:0], body)
        # Ignore all empty lines at the end of the message body, an empty
        # body becomes a single CRLF.  Line endings are normalized, so
        # stripping CR and LF removes whole CRLF pairs only.
        return body.rstrip(crlf) + crlf


canonicalize_body_simple = Simple.canonicalize_body

algorithms = dict((c.name, c) for c in (Simple,))
