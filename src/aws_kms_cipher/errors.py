class KMSCipherError(Exception):
    pass


class ConfigLoadError(KMSCipherError):
    def __init__(self, message: str, namespace: str | None = None):
        super().__init__(message)
        self.namespace = namespace


class MissingKeyError(KMSCipherError, KeyError):
    def __init__(self, namespace: str, key: str):
        super().__init__(f"Missing required property '{key}' in {namespace} configuration")
        self.namespace = namespace
        self.key = key

    def __str__(self) -> str:
        return self.args[0]


class KMSConnectionError(KMSCipherError, ConnectionError):
    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code


class CryptoOperationError(KMSCipherError):
    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code


class CiphertextDecodeError(CryptoOperationError, ValueError):
    pass
