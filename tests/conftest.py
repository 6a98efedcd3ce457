import pytest

from aws_kms_cipher import ConfigStore, CryptoOperationError

CREDENTIALS_PROPERTIES = """\
# AWS key pair
access_key_id=AKIAEXAMPLE
secret_access_key=wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY
"""

KMS_PROPERTIES = """\
region=us-east-1
key_reference=test-key
"""


class FakeKMSSession:
    def __init__(self, connector):
        self.connector = connector
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def encrypt(self, key_reference: str, plaintext) -> bytes:
        self.connector.calls.append(("encrypt", key_reference))
        self.connector.last_plaintext = plaintext
        if self.connector.fail_with:
            raise self.connector.fail_with
        return b"ENCRYPTED:" + key_reference.encode() + b":" + bytes(plaintext)

    def decrypt(self, ciphertext: bytes) -> bytes:
        self.connector.calls.append(("decrypt", None))
        if self.connector.fail_with:
            raise self.connector.fail_with
        if not ciphertext.startswith(b"ENCRYPTED:"):
            raise CryptoOperationError("Invalid ciphertext", code="InvalidCiphertextException")
        _, _, rest = ciphertext.partition(b":")
        _, _, plaintext = rest.partition(b":")
        return plaintext

    def close(self) -> None:
        self.closed = True


class FakeKMSConnector:
    def __init__(self):
        self.sessions: list[FakeKMSSession] = []
        self.calls: list[tuple[str, str | None]] = []
        self.last_plaintext = None
        self.fail_with: Exception | None = None

    def connect(self) -> FakeKMSSession:
        session = FakeKMSSession(self)
        self.sessions.append(session)
        return session


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "aws_config.properties").write_text(CREDENTIALS_PROPERTIES)
    (tmp_path / "aws_kms_config.properties").write_text(KMS_PROPERTIES)
    return tmp_path


@pytest.fixture
def config(config_dir):
    return ConfigStore(config_dir)


@pytest.fixture
def fake_connector():
    return FakeKMSConnector()
