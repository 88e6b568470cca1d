"""
Symmetric field encryption for values stored at rest.

Values are written as ``<ivHex>:<cipherHex>``. New values use AES-256-GCM
with a 12-byte nonce; the tag is appended to the ciphertext body. Values
written by the previous system used AES-256-CBC with a 16-byte IV and are
still readable. Anything that does not have one of those two shapes is
treated as plaintext stored before encryption was introduced.
"""

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Self

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from fieldvault.core.errors import ConfigurationError, DecryptionFailure
from fieldvault.core.keys import KEY_LENGTH, load_key
from fieldvault.shared import Config, Logger

logger = Logger(__name__).get_logger()

DELIMITER = ":"
NONCE_LENGTH = 12  # GCM
TAG_LENGTH = 16
LEGACY_IV_LENGTH = 16  # CBC, AES block size
BLOCK_SIZE = 16

_SHAPE = re.compile(r"([0-9a-fA-F]+):([0-9a-fA-F]+)")


@dataclass(frozen=True)
class EncryptedValue:
    initialization_vector: bytes
    ciphertext_body: bytes

    @property
    def is_legacy(self) -> bool:
        return len(self.initialization_vector) == LEGACY_IV_LENGTH

    def serialize(self) -> str:
        return (
            self.initialization_vector.hex() + DELIMITER + self.ciphertext_body.hex()
        )

    @classmethod
    def parse(cls, text: str) -> Self | None:
        """Return the parsed value, or None when ``text`` is not ciphertext."""
        match = _SHAPE.fullmatch(text)
        if match is None:
            return None

        iv_hex, body_hex = match.groups()
        if len(iv_hex) % 2 or len(body_hex) % 2:
            return None

        iv = bytes.fromhex(iv_hex)
        body = bytes.fromhex(body_hex)

        if len(iv) == NONCE_LENGTH and len(body) >= TAG_LENGTH:
            return cls(iv, body)
        if len(iv) == LEGACY_IV_LENGTH and body and len(body) % BLOCK_SIZE == 0:
            return cls(iv, body)
        return None


class CryptoService:
    """
    Reversible encryption of short text values with a server-held key.

    Holds no mutable state; a single instance can be shared across threads.
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_LENGTH:
            raise ConfigurationError(
                f"Encryption key must be {KEY_LENGTH} bytes, got {len(key)}"
            )
        self.__key = key
        self.__aead = AESGCM(key)

    @classmethod
    def from_config(
        cls, config: Config, environ: Mapping[str, str] | None = None
    ) -> Self:
        return cls(load_key(config, environ))

    def encrypt(self, plaintext: str) -> str:
        if plaintext == "":
            return plaintext

        nonce = os.urandom(NONCE_LENGTH)
        body = self.__aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        return EncryptedValue(nonce, body).serialize()

    def decrypt(self, text: str) -> str:
        if text == "":
            return text

        value = EncryptedValue.parse(text)
        if value is None:
            # Written before encryption was introduced
            return text

        if value.is_legacy:
            data = self.__decrypt_legacy(value)
        else:
            try:
                data = self.__aead.decrypt(
                    value.initialization_vector, value.ciphertext_body, None
                )
            except InvalidTag as e:
                logger.warning("Decryption failed: authentication tag mismatch")
                raise DecryptionFailure("Authentication tag mismatch") from e

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning("Decryption failed: payload is not valid UTF-8")
            raise DecryptionFailure("Decrypted payload is not valid UTF-8") from e

    def is_encrypted(self, text: str | None) -> bool:
        return bool(text) and EncryptedValue.parse(text) is not None

    def __decrypt_legacy(self, value: EncryptedValue) -> bytes:
        decryptor = Cipher(
            algorithms.AES(self.__key), modes.CBC(value.initialization_vector)
        ).decryptor()
        unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        try:
            padded = decryptor.update(value.ciphertext_body) + decryptor.finalize()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            logger.warning("Decryption of legacy CBC value failed: bad padding")
            raise DecryptionFailure("Invalid padding in legacy value") from e
