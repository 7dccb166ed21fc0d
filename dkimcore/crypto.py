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
    'DigestTooLargeError',
    'ed25519_verify',
    'HASH_ALGORITHMS',
    'hash_sha256',
    'hash_sha256_bounded',
    'hash_sha512',
    'parse_public_key',
    'RSASSA_PKCS1_v1_5_verify',
    'UnparsableKeyError',
    ]

import hashlib

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import load_der_public_key
import nacl.exceptions
import nacl.signing


# DER-encoded DigestInfo prefixes, from RFC 3447, section 9.2 Notes, page 43.
HASH_ID_MAP = {
    'sha1': b"\x30\x21\x30\x09\x06\x05\x2b\x0e\x03\x02\x1a\x05\x00\x04\x14",
    'sha256': b"\x30\x31\x30\x0d\x06\x09\x60\x86\x48\x01\x65\x03\x04\x02"
              b"\x01\x05\x00\x04\x20",
    }

HASH_ALGORITHMS = {
    b'rsa-sha256': hashlib.sha256,
    b'ed25519-sha256': hashlib.sha256,
    }

ED25519_KEY_SIZE = 32
ED25519_SIGNATURE_SIZE = 64


class DigestTooLargeError(Exception):
    """The digest is too large to fit within the requested length."""
    pass


class UnparsableKeyError(Exception):
    """The data could not be parsed as a key."""
    pass


def hash_sha256(data):
    """Return the 32 byte SHA-256 digest of data."""
    return hashlib.sha256(data).digest()


def hash_sha512(data):
    """Return the 64 byte SHA-512 digest of data."""
    return hashlib.sha512(data).digest()


def hash_sha256_bounded(data, limit):
    """SHA-256 over at most the first limit bytes of data.

    A limit of zero, or one that is not less than the data length,
    hashes everything, as a DKIM l= tag would.
    """
    if 0 < limit < len(data):
        data = data[:limit]
    return hash_sha256(data)


def parse_public_key(data):
    """Parse an RSA public key.

    @param data: DER-encoded RFC3447 RSAPublicKey, or an X.509
        subjectPublicKeyInfo containing one.
    @return: RSA public key
    """
    try:
        key = load_der_public_key(data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise UnparsableKeyError(str(e))
    if not isinstance(key, rsa.RSAPublicKey):
        raise UnparsableKeyError(
            "not an RSA public key: %s" % type(key).__name__)
    numbers = key.public_numbers()
    pk = {
        'modulus': numbers.n,
        'publicExponent': numbers.e,
    }
    return pk


def EMSA_PKCS1_v1_5_encode(hash, mlen):
    """Encode a digest with RFC3447 EMSA-PKCS1-v1_5.

    @param hash: hash object to encode
    @param mlen: desired message length
    @return: encoded digest byte string
    """
    dinfo = HASH_ID_MAP[hash.name] + hash.digest()
    if len(dinfo) + 11 > mlen:
        raise DigestTooLargeError()
    return b"\x00\x01"+b"\xff"*(mlen-len(dinfo)-3)+b"\x00"+dinfo


def str2int(s):
    """Convert a byte string to an integer.

    @param s: byte string representing a positive integer to convert
    @return: converted integer
    """
    r = 0
    for c in s:
        r = (r << 8) | c
    return r


def int2str(n, length=-1):
    """Convert an integer to a byte string.

    @param n: positive integer to convert
    @param length: minimum length
    @return: converted bytestring, of at least the minimum length if it was
        specified
    """
    assert n >= 0
    r = []
    while length < 0 or len(r) < length:
        r.append(n & 0xff)
        n >>= 8
        if length < 0 and n == 0:
            break
    r.reverse()
    assert length < 0 or len(r) == length
    return bytes(r)


def perform_rsa(message, exponent, modulus, mlen):
    """Perform RSA signing or verification.

    @param message: byte string to operate on
    @param exponent: public or private key exponent
    @param modulus: key modulus
    @param mlen: desired output length
    @return: byte string result of the operation
    """
    return int2str(pow(str2int(message), exponent, modulus), mlen)


def RSASSA_PKCS1_v1_5_verify(hash, signature, pk):
    """Verify a digest signed with RFC3447 RSASSA-PKCS1-v1_5.

    @param hash: hash object to check
    @param signature: signed digest byte string
    @param pk: public key, as returned by L{parse_public_key}
    @return: True if the signature is valid, False otherwise
    """
    modlen = len(int2str(pk['modulus']))
    encoded_digest = EMSA_PKCS1_v1_5_encode(hash, modlen)
    # A signature representative outside the modulus is simply invalid.
    if str2int(signature) >= pk['modulus']:
        return False
    signed_digest = perform_rsa(
        signature, pk['publicExponent'], pk['modulus'], modlen)
    return encoded_digest == signed_digest


def ed25519_verify(message, signature, public_key):
    """Verify an Ed25519 signature over message.

    @param message: the signed bytes, not pre-hashed
    @param signature: 64 byte signature
    @param public_key: raw 32 byte public key
    @return: True if the signature is valid, False otherwise
    """
    try:
        vk = nacl.signing.VerifyKey(public_key)
    except (nacl.exceptions.ValueError, nacl.exceptions.TypeError) as e:
        raise UnparsableKeyError(str(e))
    try:
        vk.verify(message, signature)
    except nacl.exceptions.BadSignatureError:
        return False
    return True
