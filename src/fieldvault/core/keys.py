import os
from collections.abc import Mapping

from fieldvault.core.errors import ConfigurationError
from fieldvault.shared import Config, Logger

logger = Logger(__name__).get_logger()

KEY_LENGTH = 32  # AES-256


def parse_key(raw: str) -> bytes:
    """
    Turn a provisioned key string into 32 key bytes.

    Two encodings are accepted:
    - 64 hexadecimal characters
    - any string whose UTF-8 encoding is exactly 32 bytes
    """
    if not raw:
        raise ConfigurationError("Encryption key is empty")

    if len(raw) == KEY_LENGTH * 2:
        try:
            return bytes.fromhex(raw)
        except ValueError as e:
            raise ConfigurationError(
                "Encryption key has 64 characters but is not valid hex"
            ) from e

    key = raw.encode("utf-8")
    if len(key) != KEY_LENGTH:
        raise ConfigurationError(
            f"Encryption key must be {KEY_LENGTH} bytes or {KEY_LENGTH * 2} hex "
            f"characters, got {len(key)} bytes"
        )
    return key


def load_key(config: Config, environ: Mapping[str, str] | None = None) -> bytes:
    """Read the key from the environment variable named in ``[encryption]``."""
    environ = os.environ if environ is None else environ
    key_env = config.encryption.key_env

    raw = environ.get(key_env)
    if raw is None:
        logger.error("Environment variable %s is not set", key_env)
        raise ConfigurationError(f"Missing encryption key: set {key_env}")

    try:
        key = parse_key(raw.strip())
    except ConfigurationError as e:
        logger.error("Invalid encryption key in %s: %s", key_env, e)
        raise

    logger.info("Loaded encryption key from %s", key_env)
    return key
