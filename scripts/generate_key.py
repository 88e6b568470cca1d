# Print a fresh key suitable for the ENCRYPTION_KEY environment variable
import secrets

from fieldvault.core.keys import KEY_LENGTH


def generate_key() -> str:
    return secrets.token_hex(KEY_LENGTH)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Generate an AES-256 field key")
    parser.parse_args()

    print(generate_key())
