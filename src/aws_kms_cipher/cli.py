import argparse
import logging
import os
import sys

from .config import ConfigStore
from .envelope import EnvelopeCipher
from .errors import KMSCipherError

DEFAULT_TEXT = "A simple string for testing purposes"
LOG_LEVEL_ENV = "AWS_KMS_CIPHER_LOG_LEVEL"


def run(text: str, cipher: EnvelopeCipher) -> int:
    try:
        print(f"Encrypting: '{text}'")
        encrypted = cipher.encrypt(text)
        print(f"Encrypted value: {encrypted}")

        decrypted = cipher.decrypt(encrypted)
        print(f"Decrypted value: {decrypted}")
    except KMSCipherError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="aws-kms-cipher",
        description="Encrypt a string with AWS KMS, then decrypt it again",
    )
    parser.add_argument("text", nargs="?", default=DEFAULT_TEXT, help="Text to encrypt")
    args = parser.parse_args(argv)

    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    if level not in logging.getLevelNamesMapping():
        print(f"Error: unknown log level in {LOG_LEVEL_ENV}: {level}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    return run(args.text, EnvelopeCipher(ConfigStore.from_env()))


if __name__ == "__main__":
    sys.exit(main())
