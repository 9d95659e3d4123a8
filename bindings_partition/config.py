"""YAML configuration and settings dataclasses for the partition engine."""
from __future__ import annotations

import copy
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .algorithms import PartitionAlgorithm

__all__ = [
    "ENV_CONFIG_PATH",
    "Config",
    "PartitionerSettings",
]


ENV_CONFIG_PATH = "BINDINGS_PARTITION_CONFIG"

_MISSING = object()
_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _coerce(key: str, raw: Any, typ: type) -> Any:
    if typ is object or (isinstance(raw, typ) and not (typ is int and isinstance(raw, bool))):
        return raw
    if typ is bool and isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"Configuration key {key} must be a boolean, got {raw!r}")
    if typ in (int, float) and isinstance(raw, (int, float, str)) and not isinstance(raw, bool):
        try:
            return typ(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Configuration key {key} must be {typ.__name__}, got {raw!r}") from exc
    if typ is str and isinstance(raw, (int, float)):
        return str(raw)
    if typ is dict and isinstance(raw, Mapping):
        return dict(raw)
    raise TypeError(f"Configuration key {key} has incompatible type: {type(raw)!r}")


class Config:
    """Immutable view over a nested configuration mapping.

    Keys are addressed with dotted paths (``"partitioner.show_progress"``).
    A process-wide singleton is available through :meth:`get_singleton`; when
    none was set explicitly, the file named by ``BINDINGS_PARTITION_CONFIG`` is
    loaded, or an empty configuration is used.
    """

    _singleton: Optional["Config"] = None
    _singleton_lock = threading.Lock()

    def __init__(self, data: Optional[Mapping[str, Any]] = None, *, source: Optional[Path] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(dict(data or {}))
        self.source = source

    # -------------------- loading --------------------
    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        *,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> "Config":
        config_path = Path(path).expanduser().resolve()
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise TypeError(f"Configuration file {config_path} must contain a mapping at the top level")
        data = _deep_merge(defaults or {}, raw)
        return cls(data, source=config_path)

    @classmethod
    def from_mapping(
        cls,
        data: Optional[Mapping[str, Any]],
        *,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> "Config":
        return cls(_deep_merge(defaults or {}, data or {}))

    # -------------------- singleton --------------------
    @classmethod
    def set_singleton(cls, config: Optional["Config"]) -> None:
        with cls._singleton_lock:
            cls._singleton = config

    @classmethod
    def load_singleton(cls, path: Union[str, Path]) -> "Config":
        config = cls.load(path)
        cls.set_singleton(config)
        return config

    @classmethod
    def get_singleton(cls) -> "Config":
        with cls._singleton_lock:
            if cls._singleton is None:
                env_path = os.environ.get(ENV_CONFIG_PATH)
                cls._singleton = cls.load(env_path) if env_path else cls()
            return cls._singleton

    # -------------------- access --------------------
    def get(
        self,
        key: str,
        expected_type: type = object,
        default: Any = _MISSING,
        *,
        required: bool = False,
    ) -> Any:
        cur: Any = self._data
        for part in key.split("."):
            if isinstance(cur, Mapping) and part in cur:
                cur = cur[part]
            else:
                if required:
                    raise KeyError(f"Missing configuration key: {key}")
                return None if default is _MISSING else default
        if cur is None:
            return None if default is _MISSING else default
        return _coerce(key, cur, expected_type)

    def export(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)


@dataclass(frozen=True)
class PartitionerSettings:
    default_algorithm: PartitionAlgorithm = PartitionAlgorithm.BEST_FIT_DECREASING
    show_progress: bool = False
    progress_description: str = "BindingsPartition"

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "PartitionerSettings":
        if data is None:
            return cls()
        cfg = Config({"partitioner": data})
        algorithm = cfg.get("partitioner.default_algorithm", str, default=None)
        description = cfg.get("partitioner.progress_description", str, default="BindingsPartition")
        if not description.strip():
            raise ValueError("partitioner.progress_description must be non-empty")
        return cls(
            default_algorithm=PartitionAlgorithm.parse(algorithm) if algorithm is not None else PartitionAlgorithm.BEST_FIT_DECREASING,
            show_progress=cfg.get("partitioner.show_progress", bool, default=False),
            progress_description=description,
        )

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "PartitionerSettings":
        cfg = config or Config.get_singleton()
        return cls.from_mapping(cfg.get("partitioner", dict, default=None))
