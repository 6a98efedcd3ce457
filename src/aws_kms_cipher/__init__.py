from .config import ConfigStore, Namespace, load_properties
from .envelope import EnvelopeCipher, decode_ciphertext, encode_ciphertext
from .errors import (
    CiphertextDecodeError,
    ConfigLoadError,
    CryptoOperationError,
    KMSCipherError,
    KMSConnectionError,
    MissingKeyError,
)
from .kms import Credentials, KMSConnector, KMSSession

__all__ = [
    "ConfigStore",
    "Namespace",
    "load_properties",
    "EnvelopeCipher",
    "encode_ciphertext",
    "decode_ciphertext",
    "Credentials",
    "KMSConnector",
    "KMSSession",
    "KMSCipherError",
    "ConfigLoadError",
    "MissingKeyError",
    "KMSConnectionError",
    "CryptoOperationError",
    "CiphertextDecodeError",
]
