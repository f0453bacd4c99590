# pylint: disable=line-too-long,missing-docstring,invalid-name,protected-access

from unittest import TestCase

from nestor.crypter import MAGIC, Crypter, is_encrypted
from nestor.errors import CodecError, CredentialInvalid, CredentialRequired

class Crypter_RoundTrip(TestCase):

    def setUp(self):
        self.crypter = Crypter('foo\U0001f1e7\U0001f1f7\U0001f1f3\U0001f1f4bar')

    def test_round_trip(self):
        blob = self.crypter.encrypt(b'payload' * 100)
        self.assertTrue(is_encrypted(blob))
        self.assertEqual(self.crypter.decrypt(blob), b'payload' * 100)

    def test_random_salt(self):
        self.assertNotEqual(self.crypter.encrypt(b'payload'), self.crypter.encrypt(b'payload'))

    def test_no_plaintext(self):
        self.assertNotIn(b'secret-value', self.crypter.encrypt(b'secret-value'))

    def test_empty_password(self):
        crypter = Crypter('')
        self.assertEqual(crypter.decrypt(crypter.encrypt(b'x')), b'x')

    def tearDown(self):
        pass

class Crypter_Failures(TestCase):

    def test_wrong_password(self):
        blob = Crypter('right').encrypt(b'payload')
        with self.assertRaises(CredentialInvalid):
            Crypter('wrong').decrypt(blob)

    def test_tampered(self):
        blob = bytearray(Crypter('right').encrypt(b'payload'))
        blob[-1] ^= 0xff
        with self.assertRaises(CredentialInvalid):
            Crypter('right').decrypt(bytes(blob))

    def test_not_encrypted(self):
        self.assertFalse(is_encrypted(b'{"a": "b"}'))
        with self.assertRaises(CodecError):
            Crypter('right').decrypt(b'{"a": "b"}')

    def test_truncated(self):
        with self.assertRaises(CodecError):
            Crypter('right').decrypt(MAGIC + b'\x00')

    def test_no_password(self):
        with self.assertRaises(CredentialRequired):
            Crypter(None)
