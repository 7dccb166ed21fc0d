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
#
# This has been modified from the original software.
# Copyright (c) 2016 Google, Inc.
# Contact: Brandon Long <blong@google.com>
#
# This has been modified from the original software.
# Copyright (c) 2016 Scott Kitterman <scott@kitterman.com>
#


import base64
import binascii
import re

from dkimcore.canonicalization import (
    algorithms,
    canonicalize_body_simple,
    normalize_line_endings,
    Simple,
    )
from dkimcore.crypto import (
    DigestTooLargeError,
    ed25519_verify,
    ED25519_KEY_SIZE,
    ED25519_SIGNATURE_SIZE,
    HASH_ALGORITHMS,
    hash_sha256,
    hash_sha256_bounded,
    hash_sha512,
    parse_public_key,
    RSASSA_PKCS1_v1_5_verify,
    UnparsableKeyError,
    )
from dkimcore.util import (
    extract_email_address,
    get_default_logger,
    to_bytes,
    to_text,
    )

__all__ = [
    "DKIMException",
    "EncodingError",
    "KeyFormatError",
    "MalformedMessageError",
    "ParameterError",
    "SignatureFormatError",
    "Simple",
    "algorithms",
    "body_hash",
    "canonicalize_body_simple",
    "count_received_headers",
    "decode",
    "encode",
    "extract_email_address",
    "hash_sha256",
    "hash_sha256_bounded",
    "hash_sha512",
    "normalize_line_endings",
    "split",
    "verify",
    "verify_encoded",
]

def bitsize(x):
    """Return size of long in bits."""
    return len(bin(x)) - 2

class DKIMException(Exception):
    """Base class for DKIM errors."""
    pass

class MalformedMessageError(DKIMException):
    """RFC822 message format error."""
    pass

class EncodingError(DKIMException):
    """Invalid base64 data."""
    pass

class KeyFormatError(DKIMException):
    """Key format error while parsing an RSA or Ed25519 public key."""
    pass

class SignatureFormatError(DKIMException):
    """Signature has the wrong length or shape for its algorithm."""
    pass

class ParameterError(DKIMException):
    """Input parameter error."""
    pass

def encode(data):
    """Encode binary material as standard padded base64 text.

    >>> encode(b'foo')
    'Zm9v'
    >>> encode(b'')
    ''
    """
    return base64.b64encode(data).decode('ascii')

def decode(data):
    """Decode standard padded base64.

    Characters outside the base64 alphabet are an error, not skipped.
    So is text with nonzero pad bits, which has no canonical encoding.

    >>> decode('Zm9v')
    b'foo'
    """
    if isinstance(data, str):
        try:
            data = data.encode('ascii')
        except UnicodeEncodeError as e:
            raise EncodingError("non-ascii character in base64 data: %s" % e)
    data = bytes(data)
    try:
        result = base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise EncodingError("invalid base64 data (%r): %s" % (data, e))
    if base64.b64encode(result) != data:
        raise EncodingError("non-canonical base64 data (%r)" % data)
    return result

# A CRLF that is not followed by WSP starts a new header field.
RE_FIELD_BREAK = re.compile(br"\r\n(?=[^ \t])")

def rfc822_split(message):
    """Split a CRLF normalized message into header fields and body.

    @param message: bytes with CRLF line endings
    @return: tuple of (fields, body), fields a list of (name, field) pairs
    """
    i = message.find(b"\r\n\r\n")
    if i >= 0:
        header_block = message[:i]
        body = message[i+4:]
    elif message.endswith(b"\r\n"):
        header_block = message[:-2]
        body = b""
    else:
        raise MalformedMessageError("headers don't end with CRLF")
    fields = []
    for field in RE_FIELD_BREAK.split(header_block):
        if not field.strip():
            continue
        name, colon, value = field.partition(b":")
        if not colon:
            raise MalformedMessageError(
                "Invalid header line (no colon): %r" % field)
        fields.append((name.strip().lower(), field + b"\r\n"))
    return fields, body

def split(message, logger=None):
    """Split a raw message into a header map and a body.

    >>> headers, body = split(b'From: a@example.com\\nTo: b@example.com\\n\\nhi')
    >>> sorted(headers)
    [b'from', b'to']
    >>> headers[b'from']
    [b'From: a@example.com\\r\\n']
    >>> body
    b'hi'

    @param message: the message, as bytes or str, with any mix of CR, LF and
    CRLF line endings
    @param logger: a logger to which debug info will be written (default None)
    @return: tuple of (headers, body).  headers maps each lowercased field
    name to the list of complete fields with that name, each including
    continuation lines and terminating CRLF, in message order.  headers
    and body have the type of message.
    @raise MalformedMessageError: no well formed header block can be found,
    or message is text that cannot be encoded (a lone surrogate)
    """
    if logger is None:
        logger = get_default_logger()
    is_text = isinstance(message, str)
    try:
        message = to_bytes(message)
    except UnicodeEncodeError as e:
        raise MalformedMessageError(
            "unencodable character at position %d: %s" % (e.start, e.reason))
    fields, body = rfc822_split(normalize_line_endings(message))
    headers = {}
    for name, field in fields:
        if is_text:
            name, field = to_text(name), to_text(field)
        headers.setdefault(name, []).append(field)
    logger.debug("header fields: %r" % [
        (name, len(values)) for name, values in headers.items()])
    if is_text:
        body = to_text(body)
    return headers, body

def count_received_headers(headers):
    """Return the number of Received fields (hops) in a split header map."""
    for name in (b'received', 'received'):
        if name in headers:
            return len(headers[name])
    return 0

def body_hash(body, length=0, logger=None):
    """Compute the DKIM body hash (bh= value) of a canonicalized body.

    @param body: canonicalized body, bytes or str
    @param length: body length limit as in the l= tag, 0 for the whole body
    @param logger: a logger to which debug info will be written (default None)
    @return: base64 text of the SHA-256 digest
    """
    if logger is None:
        logger = get_default_logger()
    bh = encode(hash_sha256_bounded(to_bytes(body), length))
    logger.debug("bh: %s" % bh)
    return bh

def _verify_rsa(public_key, message, signature, hasher, minkey):
    try:
        pk = parse_public_key(public_key)
    except UnparsableKeyError as e:
        raise KeyFormatError("could not parse public key: %s" % e)
    keysize = bitsize(pk['modulus'])
    modlen = (keysize + 7) // 8
    if not 0 < len(signature) <= modlen:
        raise SignatureFormatError(
            "signature length %d invalid for %d bit key (expected at most %d)"
            % (len(signature), keysize, modlen))
    try:
        res = RSASSA_PKCS1_v1_5_verify(hasher(message), signature, pk)
    except DigestTooLargeError:
        raise KeyFormatError("digest too large for modulus: %d bits" % keysize)
    if res and keysize < minkey:
        raise KeyFormatError("public key too small: %d" % keysize)
    return res

def _verify_ed25519(public_key, message, signature):
    if len(public_key) != ED25519_KEY_SIZE:
        raise KeyFormatError(
            "Ed25519 public key must be %d bytes, got %d"
            % (ED25519_KEY_SIZE, len(public_key)))
    if len(signature) != ED25519_SIGNATURE_SIZE:
        raise SignatureFormatError(
            "Ed25519 signature must be %d bytes, got %d"
            % (ED25519_SIGNATURE_SIZE, len(signature)))
    try:
        return ed25519_verify(message, signature, public_key)
    except UnparsableKeyError as e:
        raise KeyFormatError("could not parse public key: %s" % e)

def verify(algorithm, public_key, message, signature, logger=None, minkey=0):
    """Verify a signature over message.

    Malformed keys and signatures raise; a well formed signature that does
    not match returns False.

    @param algorithm: b'rsa-sha256' or b'ed25519-sha256'
    @param public_key: raw 32 byte Ed25519 key, or DER-encoded RSA key
    @param message: the signed bytes.  rsa-sha256 hashes them with SHA-256
    before checking; ed25519-sha256 verifies them as given.
    @param signature: raw signature bytes
    @param logger: a logger to which debug info will be written (default None)
    @param minkey: minimum RSA modulus size in bits for a valid signature
    (default 0, no minimum)
    @return: True if the signature is valid, False otherwise
    @raise KeyFormatError: the key does not fit the algorithm
    @raise SignatureFormatError: the signature does not fit the algorithm
    @raise ParameterError: unsupported algorithm
    """
    if logger is None:
        logger = get_default_logger()
    if isinstance(algorithm, str):
        algorithm = algorithm.encode('ascii', 'replace')
    try:
        hasher = HASH_ALGORITHMS[algorithm]
    except KeyError:
        raise ParameterError(
            "Unsupported signature algorithm: %r" % algorithm)
    message = to_bytes(message)
    if algorithm == b'rsa-sha256':
        res = _verify_rsa(public_key, message, signature, hasher, minkey)
    else:
        res = _verify_ed25519(public_key, message, signature)
    logger.debug("%s valid: %s" % (algorithm.decode('ascii'), res))
    return res

def verify_encoded(algorithm, public_key, message, signature, logger=None,
                   minkey=0):
    """Like L{verify}, with key and signature given as base64 tag values.

    Folding whitespace in the base64 text is ignored.

    @raise EncodingError: key or signature is not valid base64
    """
    public_key = decode(re.sub(br"\s+", b"", to_bytes(public_key)))
    signature = decode(re.sub(br"\s+", b"", to_bytes(signature)))
    return verify(algorithm, public_key, message, signature,
                  logger=logger, minkey=minkey)
