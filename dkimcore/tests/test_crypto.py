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

import binascii
import hashlib
import unittest

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, padding, rsa

from dkimcore.crypto import (
    DigestTooLargeError,
    ed25519_verify,
    EMSA_PKCS1_v1_5_encode,
    hash_sha256,
    hash_sha256_bounded,
    hash_sha512,
    int2str,
    parse_public_key,
    perform_rsa,
    RSASSA_PKCS1_v1_5_verify,
    str2int,
    UnparsableKeyError,
    )


# RFC 8032, section 7.1, TEST 1.
RFC8032_PUBLIC_KEY = binascii.unhexlify(
    b'd75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a')
RFC8032_SIGNATURE = binascii.unhexlify(
    b'e5564300c360ac729086e2cc806e828a84877f1eb8e5d974d873e065224901555'
    b'fb8821590a33bacc61e39701cf9b46bd25bf5f0595bbe24655141438e7a100b')


class TestStrIntConversion(unittest.TestCase):

    def test_str2int(self):
        self.assertEqual(1234, str2int(b'\x04\xd2'))

    def test_int2str(self):
        self.assertEqual(b'\x04\xd2', int2str(1234))

    def test_int2str_with_length(self):
        self.assertEqual(b'\x00\x00\x04\xd2', int2str(1234, 4))

    def test_int2str_fails_on_negative(self):
        self.assertRaises(AssertionError, int2str, -1)


class TestDigests(unittest.TestCase):

    def test_sha256(self):
        self.assertEqual(
            binascii.unhexlify(
                b'ba7816bf8f01cfea414140de5dae2223'
                b'b00361a396177a9cb410ff61f20015ad'),
            hash_sha256(b'abc'))

    def test_sha256_empty(self):
        self.assertEqual(
            binascii.unhexlify(
                b'e3b0c44298fc1c149afbf4c8996fb924'
                b'27ae41e4649b934ca495991b7852b855'),
            hash_sha256(b''))

    def test_sha512(self):
        digest = hash_sha512(b'abc')
        self.assertEqual(64, len(digest))
        self.assertEqual(
            binascii.unhexlify(
                b'ddaf35a193617abacc417349ae204131'
                b'12e6fa4e89a97ea20a9eeee64b55d39a'
                b'2192992a274fc1a836ba3c23a3feebbd'
                b'454d4423643ce80e2a9ac94fa54ca49f'),
            digest)

    def test_bounded_truncates(self):
        self.assertEqual(
            hash_sha256(b'abc'), hash_sha256_bounded(b'abcdef', 3))

    def test_bounded_without_limit(self):
        data = b'Hello, World!\r\n'
        self.assertEqual(hash_sha256(data), hash_sha256_bounded(data, 0))
        self.assertEqual(
            hash_sha256(data), hash_sha256_bounded(data, len(data)))
        self.assertEqual(
            hash_sha256(data), hash_sha256_bounded(data, len(data) + 10))

    def test_bounded_empty(self):
        self.assertEqual(hash_sha256(b''), hash_sha256_bounded(b'', 5))


class TestParseKeys(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.key = rsa.generate_private_key(
            public_exponent=65537, key_size=2048)
        cls.numbers = cls.key.public_key().public_numbers()

    def test_parse_pkcs1_public_key(self):
        data = self.key.public_key().public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.PKCS1)
        key = parse_public_key(data)
        self.assertEqual(key['modulus'], self.numbers.n)
        self.assertEqual(key['publicExponent'], 65537)

    def test_parse_spki_public_key(self):
        data = self.key.public_key().public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo)
        key = parse_public_key(data)
        self.assertEqual(key['modulus'], self.numbers.n)

    def test_garbage(self):
        self.assertRaises(UnparsableKeyError, parse_public_key, b'\x00' * 31)

    def test_not_rsa(self):
        data = ed25519.Ed25519PrivateKey.generate().public_key().public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo)
        self.assertRaises(UnparsableKeyError, parse_public_key, data)


class TestEMSA_PKCS1_v1_5(unittest.TestCase):

    def test_encode_sha256(self):
        hash = hashlib.sha256(b'message')
        self.assertEqual(
            b'\x00\x01\xff\xff\xff\xff\xff\xff\xff\xff\x00'
            b'010\x0d\x06\x09\x60\x86\x48\x01\x65\x03\x04\x02\x01\x05\x00\x04'
            b' ' + hash.digest(),
            EMSA_PKCS1_v1_5_encode(hash, 62))

    def test_encode_sha1(self):
        hash = hashlib.sha1(b'message')
        self.assertEqual(
            b'\x00\x01\xff\xff\xff\xff\xff\xff\xff\xff\x00'
            b'0!0\x09\x06\x05\x2b\x0e\x03\x02\x1a\x05\x00\x04\x14'
            + hash.digest(),
            EMSA_PKCS1_v1_5_encode(hash, 46))

    def test_encode_forbids_too_short(self):
        # PKCS#1 requires at least 8 bytes of padding, so there must be
        # at least that much space.
        hash = hashlib.sha1(b'message')
        self.assertRaises(
            DigestTooLargeError,
            EMSA_PKCS1_v1_5_encode, hash, 45)


class TestRSA(unittest.TestCase):

    message = binascii.unhexlify(b'0004fb')
    modulus = 186101
    modlen = 3
    public_exponent = 907
    private_exponent = 2851

    def test_perform(self):
        signed = perform_rsa(
            self.message, self.private_exponent, self.modulus, self.modlen)
        self.assertEqual(binascii.unhexlify(b'01f140'), signed)

    def test_sign_and_verify(self):
        signed = perform_rsa(
            self.message, self.private_exponent, self.modulus, self.modlen)
        unsigned = perform_rsa(
            signed, self.public_exponent, self.modulus, self.modlen)
        self.assertEqual(self.message, unsigned)


class TestRSASSA(unittest.TestCase):

    test_message = b'0123456789abcdef0123'

    @classmethod
    def setUpClass(cls):
        key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        numbers = key.public_key().public_numbers()
        cls.pk = {'modulus': numbers.n, 'publicExponent': numbers.e}
        cls.signature = key.sign(
            cls.test_message, padding.PKCS1v15(), hashes.SHA256())

    def test_verify(self):
        self.assertTrue(
            RSASSA_PKCS1_v1_5_verify(
                hashlib.sha256(self.test_message), self.signature, self.pk))

    def test_other_message(self):
        self.assertFalse(
            RSASSA_PKCS1_v1_5_verify(
                hashlib.sha256(b'0123456789abcdef0124'), self.signature,
                self.pk))

    def test_invalid_signature(self):
        pk = dict(self.pk, modulus=self.pk['modulus'] + 2)
        self.assertFalse(
            RSASSA_PKCS1_v1_5_verify(
                hashlib.sha256(self.test_message), self.signature, pk))

    def test_signature_not_below_modulus(self):
        signature = int2str(self.pk['modulus'], len(self.signature))
        self.assertFalse(
            RSASSA_PKCS1_v1_5_verify(
                hashlib.sha256(self.test_message), signature, self.pk))


class TestEd25519(unittest.TestCase):

    def test_rfc8032_vector(self):
        self.assertTrue(
            ed25519_verify(b'', RFC8032_SIGNATURE, RFC8032_PUBLIC_KEY))

    def test_rfc8032_vector_other_message(self):
        self.assertFalse(
            ed25519_verify(b'\x00', RFC8032_SIGNATURE, RFC8032_PUBLIC_KEY))

    def test_short_key_is_unparsable(self):
        self.assertRaises(
            UnparsableKeyError,
            ed25519_verify, b'', RFC8032_SIGNATURE, RFC8032_PUBLIC_KEY[:31])
