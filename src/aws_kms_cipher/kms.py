import logging
from dataclasses import dataclass, field

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .config import ConfigStore, Namespace
from .errors import CryptoOperationError, KMSConnectionError

logger = logging.getLogger(__name__)

# Error codes KMS returns when the request never got past authentication.
AUTH_ERROR_CODES = frozenset(
    {
        "UnrecognizedClientException",
        "InvalidSignatureException",
        "IncompleteSignature",
        "InvalidClientTokenId",
        "ExpiredTokenException",
        "MissingAuthenticationToken",
    }
)

NO_RETRIES = Config(retries={"max_attempts": 1, "mode": "standard"})


@dataclass(frozen=True)
class Credentials:
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)

    @classmethod
    def from_config(cls, config: ConfigStore) -> "Credentials":
        return cls(
            access_key_id=config.get(Namespace.CREDENTIALS, "access_key_id"),
            secret_access_key=config.get(Namespace.CREDENTIALS, "secret_access_key"),
            session_token=config.get_optional(Namespace.CREDENTIALS, "session_token"),
        )


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "Unknown")


class KMSSession:
    def __init__(self, client, region: str):
        self.client = client
        self.region = region
        self._closed = False

    def __enter__(self) -> "KMSSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _call(self, operation: str, **kwargs) -> dict:
        if self._closed:
            raise KMSConnectionError("KMS session is closed")
        try:
            return getattr(self.client, operation)(**kwargs)
        except ClientError as e:
            code = _error_code(e)
            if code in AUTH_ERROR_CODES:
                raise KMSConnectionError(f"KMS rejected credentials: {e}", code=code) from e
            raise CryptoOperationError(f"KMS {operation} failed: {e}", code=code) from e
        except BotoCoreError as e:
            raise KMSConnectionError(f"Could not reach KMS in {self.region}: {e}") from e

    def encrypt(self, key_reference: str, plaintext: bytes | bytearray) -> bytes:
        response = self._call("encrypt", KeyId=key_reference, Plaintext=plaintext)
        blob = response.get("CiphertextBlob")
        if not blob:
            raise CryptoOperationError("KMS encrypt response has no CiphertextBlob")
        return blob

    def decrypt(self, ciphertext: bytes) -> bytes:
        response = self._call("decrypt", CiphertextBlob=ciphertext)
        plaintext = response.get("Plaintext")
        if plaintext is None:
            raise CryptoOperationError("KMS decrypt response has no Plaintext")
        return plaintext

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.client.close()
        logger.debug("Closed KMS session in %s", self.region)


class KMSConnector:
    def __init__(self, config: ConfigStore):
        self.config = config

    def connect(self) -> KMSSession:
        credentials = Credentials.from_config(self.config)
        region = self.config.get(Namespace.KMS, "region")
        endpoint_url = self.config.get_optional(Namespace.KMS, "endpoint_url")

        try:
            client = boto3.client(
                "kms",
                region_name=region,
                endpoint_url=endpoint_url,
                aws_access_key_id=credentials.access_key_id,
                aws_secret_access_key=credentials.secret_access_key,
                aws_session_token=credentials.session_token,
                config=NO_RETRIES,
            )
        except (BotoCoreError, ValueError) as e:
            raise KMSConnectionError(
                f"Failed to create KMS client for region {region!r}: {e}"
            ) from e

        logger.debug("Connected to AWS KMS in the %s region", region)
        return KMSSession(client, region)
