import base64
import binascii
import ctypes
import logging

from .config import ConfigStore, Namespace
from .errors import CiphertextDecodeError, CryptoOperationError, KMSCipherError
from .kms import KMSConnector

logger = logging.getLogger(__name__)


def secure_zero(data: bytearray) -> None:
    if not isinstance(data, bytearray) or not data:
        return
    ctypes.memset(ctypes.addressof((ctypes.c_char * len(data)).from_buffer(data)), 0, len(data))


def encode_ciphertext(blob: bytes) -> str:
    return base64.b64encode(blob).decode("ascii")


def decode_ciphertext(text: str) -> bytes:
    try:
        blob = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise CiphertextDecodeError(f"Ciphertext is not valid base64: {e}") from e
    if not blob:
        raise CiphertextDecodeError("Ciphertext is empty")
    return blob


class EnvelopeCipher:
    def __init__(self, config: ConfigStore, connector: KMSConnector | None = None):
        self.config = config
        self.connector = connector or KMSConnector(config)

    def encrypt(self, plaintext: str) -> str:
        logger.debug("encrypt - starting")
        data = bytearray(plaintext.encode("utf-8"))
        try:
            key_reference = self.config.get(Namespace.KMS, "key_reference")
            with self.connector.connect() as session:
                blob = session.encrypt(key_reference, data)
            ciphertext = encode_ciphertext(blob)
        except KMSCipherError as e:
            logger.error("Failed to encrypt: %s", e)
            raise
        finally:
            secure_zero(data)

        logger.debug("encrypt - done (%d bytes of ciphertext)", len(blob))
        return ciphertext

    def decrypt(self, ciphertext: str) -> str:
        logger.debug("decrypt - starting")
        try:
            blob = decode_ciphertext(ciphertext)
            with self.connector.connect() as session:
                data = session.decrypt(blob)
            try:
                plaintext = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise CryptoOperationError("KMS returned plaintext that is not valid UTF-8") from e
        except KMSCipherError as e:
            logger.error("Failed to decrypt: %s", e)
            raise

        logger.debug("decrypt - done")
        return plaintext
