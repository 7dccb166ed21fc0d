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
# Copyright (c) 2011 William Grant <me@williamgrant.id.au>

__all__ = [
    'extract_email_address',
    'get_default_logger',
    'to_bytes',
    'to_text',
    ]

import logging
import re


def get_default_logger():
    """Get the default dkimcore logger."""
    logger = logging.getLogger('dkimcore')
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger


def to_bytes(s):
    """Return s as bytes; text is encoded without loss of stray bytes."""
    if isinstance(s, str):
        return s.encode('utf-8', 'surrogateescape')
    return bytes(s)


def to_text(b):
    """Inverse of L{to_bytes}."""
    return b.decode('utf-8', 'surrogateescape')


ANGLE_ADDR_RE = re.compile(r'<([^>]+)>')
BARE_ADDR_RE = re.compile(
    r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b')


def extract_email_address(header_value):
    """Extract the mailbox address from a From/Reply-To style value.

    An address in angle brackets wins over a bare address elsewhere in
    the value.

    >>> extract_email_address('John Doe <john@example.com>')
    'john@example.com'
    >>> extract_email_address('reply to jane@example.org please')
    'jane@example.org'
    >>> extract_email_address('undisclosed-recipients:;') is None
    True
    """
    m = ANGLE_ADDR_RE.search(header_value)
    if m is not None:
        return m.group(1)
    m = BARE_ADDR_RE.search(header_value)
    if m is not None:
        return m.group(1)
    return None
