"""Scanner Config: centralised loader for ``config.yaml``.

Reads the ``config.yaml`` file at the project root and exposes its values
through dotted keys.  ``IVSCAN_*`` environment variables **always take
priority** over the YAML file; the file is the friendly fallback.

Usage::

    from iv_scanner.utils.scanner_config import cfg

    print(cfg.get_bool("vision.enabled"))              # True
    print(cfg.get_str("vision.on_missing_anchors"))    # "abort"
    print(cfg.get_dict("calibration"))                 # {...}

Equivalent environment variable: ``IVSCAN_VISION_ON_MISSING_ANCHORS``
  → the YAML key ``vision.on_missing_anchors`` becomes
  ``IVSCAN_VISION_ON_MISSING_ANCHORS``.

Loading is lazy (on first access) and thread-safe.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _find_config_path() -> Path:
    """Resolve the config.yaml path walking up to the project root."""
    env_path = os.getenv("IVSCAN_CONFIG_FILE", "").strip()
    if env_path:
        return Path(env_path)

    start = Path(__file__).resolve().parent
    for ancestor in [start, start.parent, start.parent.parent]:
        candidate = ancestor / "config.yaml"
        if candidate.exists():
            return candidate

    return start.parent.parent / "config.yaml"


class ScannerConfig:
    """Centralised settings access with env > yaml priority.

    Attributes:
        _data: Raw dictionary loaded from the YAML file.
        _loaded: Whether the YAML file has been read already.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._loaded: bool = False
        self._lock = threading.Lock()

    # ── Lazy loading ──────────────────────────────────────────────

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            self._load()
            self._loaded = True

    def _load(self) -> None:
        config_path = _find_config_path()
        if not config_path.exists():
            self._data = {}
            return
        try:
            with open(config_path, "r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Could not read %s: %s", config_path, exc)
            self._data = {}
            return
        self._data = raw if isinstance(raw, dict) else {}

    def reload(self) -> None:
        """Force a re-read of the file (tests, hot reload)."""
        with self._lock:
            self._loaded = False
            self._load()
            self._loaded = True

    # ── Dotted key access ─────────────────────────────────────────

    def _resolve(self, dotted_key: str) -> Any:
        """Resolve ``vision.enabled`` → data[vision][enabled]."""
        self._ensure_loaded()
        node: Any = self._data
        for part in dotted_key.split("."):
            if isinstance(node, dict):
                node = node.get(part)
            else:
                return None
        return node

    @staticmethod
    def _env_key(dotted_key: str) -> str:
        """Convert ``vision.enabled`` → ``IVSCAN_VISION_ENABLED``."""
        return "IVSCAN_" + dotted_key.upper().replace(".", "_")

    # ── Typed getters ─────────────────────────────────────────────

    def get_str(self, key: str, default: str = "") -> str:
        env_val = os.getenv(self._env_key(key), "").strip()
        if env_val:
            return env_val
        yaml_val = self._resolve(key)
        if yaml_val is not None:
            return str(yaml_val)
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        env_val = os.getenv(self._env_key(key), "").strip()
        if env_val:
            try:
                return int(env_val)
            except ValueError:
                pass
        yaml_val = self._resolve(key)
        if yaml_val is not None:
            try:
                return int(yaml_val)
            except (ValueError, TypeError):
                pass
        return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        env_val = os.getenv(self._env_key(key), "").strip()
        if env_val:
            try:
                return float(env_val)
            except ValueError:
                pass
        yaml_val = self._resolve(key)
        if yaml_val is not None:
            try:
                return float(yaml_val)
            except (ValueError, TypeError):
                pass
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        env_val = os.getenv(self._env_key(key), "").strip().lower()
        if env_val in _TRUE_VALUES:
            return True
        if env_val in _FALSE_VALUES:
            return False
        yaml_val = self._resolve(key)
        if isinstance(yaml_val, bool):
            return yaml_val
        if yaml_val is not None:
            raw = str(yaml_val).strip().lower()
            if raw in _TRUE_VALUES:
                return True
            if raw in _FALSE_VALUES:
                return False
        return default

    def get_dict(self, key: str) -> dict[str, Any]:
        """Return a whole section as a dictionary (env not supported)."""
        yaml_val = self._resolve(key)
        if isinstance(yaml_val, dict):
            return dict(yaml_val)
        return {}

    def __repr__(self) -> str:
        self._ensure_loaded()
        return f"<ScannerConfig sections={list(self._data.keys())}>"


# ── Global singleton ─────────────────────────────────────────────
cfg = ScannerConfig()
