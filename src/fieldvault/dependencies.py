from fastapi import HTTPException, Request

from fieldvault.core import CryptoService
from fieldvault.shared import Logger

logger = Logger(__name__).get_logger()


def get_crypto_service(request: Request) -> CryptoService:
    """Return the service built at startup and stored on ``app.state``."""
    crypto = getattr(request.app.state, "crypto", None)
    if crypto is None:
        logger.error("Crypto service requested before application startup")
        raise HTTPException(status_code=503, detail="Encryption unavailable")
    return crypto
