"""
Opaque file identifiers for Basic File Browser.

A file id is the logical path encrypted with a process-wide secret and
rendered as lowercase hex, so ids can be exchanged for paths without a
server-side lookup table. Encryption is AES-192 in CBC mode with PKCS7
padding; the key and IV are derived from the secret with OpenSSL's
EVP_BytesToKey scheme (MD5, one round, no salt). The same path always
yields the same id, which keeps ids bookmarkable.

Note: ids are obfuscation, not an access token. They carry no MAC and a
forged id that happens to decrypt cleanly decodes to whatever path it
names. Access control belongs in front of this module.
"""

import hashlib
import re
from typing import Tuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from core.exceptions import ConfigurationError, DecodeError

KEY_SIZE = 24  # AES-192
BLOCK_SIZE = 16

_HEX_PATTERN = re.compile(r'[0-9a-fA-F]+')


def derive_key_and_iv(secret: str) -> Tuple[bytes, bytes]:
    """
    Derive an AES-192 key and CBC IV from a passphrase.

    Args:
        secret: Passphrase established at startup

    Returns:
        Tuple of (key, iv)
    """
    password = secret.encode('utf-8')
    material = b''
    digest = b''
    while len(material) < KEY_SIZE + BLOCK_SIZE:
        digest = hashlib.md5(digest + password).digest()
        material += digest
    return material[:KEY_SIZE], material[KEY_SIZE:KEY_SIZE + BLOCK_SIZE]


class PathCodec:
    """Reversible, keyed mapping between logical paths and opaque ids."""

    def __init__(self, secret: str):
        if not secret:
            raise ConfigurationError("File id secret cannot be empty", field='codec.secret')
        self._key, self._iv = derive_key_and_iv(secret)

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(self._iv))

    def encode(self, logical_path: str) -> str:
        """Encrypt a logical path into a hex identifier."""
        padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
        padded = padder.update(logical_path.encode('utf-8')) + padder.finalize()

        encryptor = self._cipher().encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return ciphertext.hex()

    def decode(self, file_id: str) -> str:
        """
        Decrypt a hex identifier back into its logical path.

        Raises:
            DecodeError: If the id is not hex, has the wrong length, fails
                padding checks, or does not decrypt to a legal path
        """
        if not isinstance(file_id, str) or not _HEX_PATTERN.fullmatch(file_id):
            raise DecodeError("File id is not a hex string", file_id=file_id)
        if len(file_id) % (BLOCK_SIZE * 2) != 0:
            raise DecodeError("File id has an invalid length", file_id=file_id)

        try:
            decryptor = self._cipher().decryptor()
            padded = decryptor.update(bytes.fromhex(file_id)) + decryptor.finalize()

            unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            logical_path = plaintext.decode('utf-8')
        except ValueError as e:
            raise DecodeError(f"File id could not be decrypted: {e}", file_id=file_id)

        if '\x00' in logical_path:
            raise DecodeError("File id decodes to an illegal path", file_id=file_id)

        return logical_path
