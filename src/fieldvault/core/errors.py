class CryptoError(Exception):
    """Base class for field encryption errors."""


class DecryptionFailure(CryptoError):
    """A value shaped like ``ivHex:cipherHex`` could not be decrypted.

    Raised for a wrong key, a corrupted body or a payload that does not
    decode as UTF-8. Never raised for legacy plaintext.
    """


class ConfigurationError(CryptoError):
    """The encryption key is missing or malformed."""
