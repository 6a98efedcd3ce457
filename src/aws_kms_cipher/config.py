import logging
import os
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from .errors import ConfigLoadError, MissingKeyError

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "AWS_KMS_CIPHER_CONFIG_DIR"
COMMENT_PREFIXES = ("#", "!")


class Namespace(str, Enum):
    CREDENTIALS = "credentials"
    KMS = "kms"


DEFAULT_RESOURCES: Mapping[Namespace, str] = MappingProxyType(
    {
        Namespace.CREDENTIALS: "aws_config.properties",
        Namespace.KMS: "aws_kms_config.properties",
    }
)

Loader = Callable[[Path], Mapping[str, str]]


def load_properties(path: Path) -> dict[str, str]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigLoadError(f"Config file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"Failed to read config file {path}: {e}") from e

    props: dict[str, str] = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigLoadError(f"Malformed line {lineno} in {path}: expected key=value")
        props[key] = value.strip()
    return props


@dataclass
class _NamespaceSlot:
    name: str
    path: Path
    _props: Mapping[str, str] | None = field(default=None, repr=False)
    _error: ConfigLoadError | None = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def resolve(self, loader: Loader) -> Mapping[str, str]:
        props = self._props
        if props is not None:
            return props

        with self._lock:
            if self._props is not None:
                return self._props
            if self._error is not None:
                raise self._error.with_traceback(None)

            logger.debug("Loading %s configuration from %s", self.name, self.path)
            try:
                loaded = loader(self.path)
            except ConfigLoadError as e:
                self._error = e
            except OSError as e:
                self._error = ConfigLoadError(f"Failed to read config file {self.path}: {e}")
                self._error.__cause__ = e
            else:
                self._props = MappingProxyType(dict(loaded))
                return self._props

            self._error.namespace = self.name
            logger.debug("Failed to load %s configuration: %s", self.name, self._error)
            raise self._error


class ConfigStore:
    def __init__(
        self,
        config_dir: str | Path,
        resources: Mapping[Namespace, str] = DEFAULT_RESOURCES,
        loader: Loader = load_properties,
    ):
        self.config_dir = Path(config_dir)
        self._loader = loader
        self._slots = {
            Namespace(namespace): _NamespaceSlot(
                name=Namespace(namespace).value, path=self.config_dir / filename
            )
            for namespace, filename in resources.items()
        }

    @classmethod
    def from_env(cls, **kwargs) -> "ConfigStore":
        return cls(os.environ.get(CONFIG_DIR_ENV) or Path.cwd(), **kwargs)

    def _slot(self, namespace: Namespace) -> _NamespaceSlot:
        slot = self._slots.get(namespace)
        if slot is None:
            raise ConfigLoadError(f"No resource configured for namespace {namespace!r}")
        return slot

    def namespace(self, namespace: Namespace) -> Mapping[str, str]:
        return self._slot(namespace).resolve(self._loader)

    def get(self, namespace: Namespace, key: str) -> str:
        slot = self._slot(namespace)
        value = slot.resolve(self._loader).get(key)
        if not value:
            raise MissingKeyError(slot.name, key)
        return value

    def get_optional(
        self, namespace: Namespace, key: str, default: str | None = None
    ) -> str | None:
        return self.namespace(namespace).get(key) or default
