# Field encryption and the record-level logic built on it.
# Nothing here depends on the HTTP layer.
from .crypto import CryptoService, EncryptedValue
from .errors import ConfigurationError, CryptoError, DecryptionFailure

__all__ = [
    "ConfigurationError",
    "CryptoError",
    "CryptoService",
    "DecryptionFailure",
    "EncryptedValue",
]
