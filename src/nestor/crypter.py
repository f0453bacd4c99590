'''
Password-based encryption of byte blobs.

Payloads are compressed with zlib and sealed with AES-256-GCM. The key is
derived from the password with scrypt and a random salt. An encrypted
blob is laid out as
```
MAGIC | salt (16 bytes) | nonce (12 bytes) | ciphertext and tag
```
'''

import os
import zlib

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

import logging

from .errors import CodecError, CredentialInvalid, CredentialRequired

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

MAGIC = b'NESTOR\x00\x01'

SALT_SIZE = 16
NONCE_SIZE = 12
KEY_SIZE = 32

# scrypt work factors
SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1

def is_encrypted(data):
    '''
    Test if `data` is a blob produced by `Crypter.encrypt`.
    '''

    return data[:len(MAGIC)] == MAGIC

class Crypter(object):
    '''
    Encrypts and decrypts blobs with a password.
    '''

    def __init__(self, password):
        if password is None:
            raise CredentialRequired('a password is required')

        self._password = password.encode('utf-8') if isinstance(password, str) else bytes(password)

    def _key(self, salt):
        kdf = Scrypt(salt=salt, length=KEY_SIZE, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
        return kdf.derive(self._password)

    def encrypt(self, data):
        '''
        Compress and encrypt `data`.
        '''

        salt = os.urandom(SALT_SIZE)
        nonce = os.urandom(NONCE_SIZE)

        sealed = AESGCM(self._key(salt)).encrypt(nonce, zlib.compress(data), MAGIC)
        logger.debug('encrypted {} bytes into {} bytes'.format(len(data), len(sealed)))

        return MAGIC + salt + nonce + sealed

    def decrypt(self, blob):
        '''
        Decrypt and decompress `blob`.

        Raises `CredentialInvalid` if the password does not match and
        `CodecError` if `blob` is not an encrypted blob.
        '''

        header = len(MAGIC) + SALT_SIZE + NONCE_SIZE
        if not is_encrypted(blob) or len(blob) < header:
            raise CodecError('not an encrypted blob')

        salt = blob[len(MAGIC):len(MAGIC) + SALT_SIZE]
        nonce = blob[len(MAGIC) + SALT_SIZE:header]

        try:
            compressed = AESGCM(self._key(salt)).decrypt(nonce, blob[header:], MAGIC)
        except InvalidTag:
            raise CredentialInvalid('wrong password or corrupted data')

        try:
            return zlib.decompress(compressed)
        except zlib.error as exc:
            raise CodecError('failed to inflate payload: {}'.format(exc))
