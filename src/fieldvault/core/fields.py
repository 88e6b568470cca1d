from fieldvault.core.crypto import CryptoService
from fieldvault.core.errors import DecryptionFailure
from fieldvault.shared import Logger

logger = Logger(__name__).get_logger()

# User columns stored encrypted at rest
SENSITIVE_FIELDS = ("cpf", "address")


def seal(crypto: CryptoService, value: str | None) -> str | None:
    if value is None:
        return None
    return crypto.encrypt(value)


def reveal(crypto: CryptoService, value: str | None) -> str | None:
    """
    Decrypt a stored value for display.

    A value that cannot be decrypted is returned as stored rather than
    failing the whole read.
    """
    if value is None:
        return None
    try:
        return crypto.decrypt(value)
    except DecryptionFailure as e:
        logger.warning("Returning stored value undecrypted: %s", e)
        return value
