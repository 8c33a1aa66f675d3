from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional

import yaml

if TYPE_CHECKING:
    from .system import Environment

logger = logging.getLogger(__name__)

# Supported config filenames (in order of preference)
CONFIG_FILENAMES: List[str] = [".strata.yaml", ".strata.yml"]


def get_config_path(home: Path) -> Path:
    """Return the first existing config file in ``home``.

    Falls back to ``.strata.yaml`` when none exists yet.
    """
    for filename in CONFIG_FILENAMES:
        path = Path(home) / filename
        if path.exists():
            return path
    return Path(home) / CONFIG_FILENAMES[0]


class Config:
    """Configuration manager for strata, backed by a YAML file."""

    DEFAULT_CONFIG = {
        "version": 1,
        "template_dir": "~/.strata",
        "environment": "default",
        "remote": None,
        "options": {
            "backup_before_overwrite": True,
            "prompt_on_diff": True,
        },
        "conflicts": {"strategy": "interactive"},
        "tracking": [],
    }

    def __init__(
        self,
        config_path: Optional[Path] = None,
        env: Optional[Environment] = None,
    ):
        # Use deepcopy to avoid mutating the class-level DEFAULT_CONFIG
        self.data = copy.deepcopy(self.DEFAULT_CONFIG)
        self.env = env
        self.path = Path(config_path) if config_path else None

        if self.path and self.path.exists():
            with open(self.path, "r") as f:
                user_config = yaml.safe_load(f)
            if user_config:
                self._deep_update(self.data, user_config)
            logger.debug(f"Loaded config from {self.path}")

    def _deep_update(self, base: Dict, update: Dict):
        for k, v in update.items():
            if isinstance(v, dict) and k in base and isinstance(base[k], dict):
                self._deep_update(base[k], v)
            else:
                base[k] = v

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a config value by dot-separated path."""
        keys = key_path.split(".")
        value = self.data
        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key_path: str, value: Any):
        """Set a config value by dot-separated path, creating sections."""
        keys = key_path.split(".")
        node = self.data
        for key in keys[:-1]:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[keys[-1]] = value

    def save(self, path: Optional[Path] = None):
        """Write the config back as YAML."""
        target = Path(path) if path else self.path
        if target is None:
            raise ValueError("No config path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w") as f:
            yaml.safe_dump(self.data, f, default_flow_style=False)
        self.path = target
        logger.debug(f"Saved config to {target}")

    def get_template_dir(self) -> Path:
        """Template directory, absolute, with ``~`` expanded."""
        raw = str(self.get("template_dir"))
        home = self.env.home if self.env else Path.home()
        if raw == "~" or raw.startswith("~/"):
            return home / raw[2:]
        template_dir = Path(raw).expanduser()
        if not template_dir.is_absolute():
            template_dir = home / template_dir
        return template_dir

    def get_environment(self) -> str:
        return self.get("environment") or "default"

    def get_option(self, name: str, default: bool = True) -> bool:
        value = self.get(f"options.{name}", default)
        return bool(value)


class TrackingList:
    """Ordered, duplicate-free list of tracked home-relative paths.

    Engines only ever append. The list is loaded from the config at the
    start of a command and written back with ``persist`` at the end.
    """

    def __init__(self, paths: Optional[Iterable[str]] = None):
        self._paths: List[str] = []
        self._seen = set()
        self.dirty = False
        for p in paths or []:
            self._append(str(p))

    @classmethod
    def from_config(cls, config: Config) -> "TrackingList":
        paths = config.get("tracking") or []
        if not isinstance(paths, list):
            logger.warning("Ignoring malformed 'tracking' entry in config")
            paths = []
        return cls(paths)

    def _append(self, path: str) -> bool:
        if path in self._seen:
            return False
        self._seen.add(path)
        self._paths.append(path)
        return True

    def add(self, path) -> bool:
        """Register ``path``. Returns False if it was already tracked."""
        added = self._append(str(path))
        if added:
            self.dirty = True
            logger.debug(f"Tracking {path}")
        return added

    def persist(self, config: Config, path: Optional[Path] = None) -> bool:
        """Write the list into ``config`` and save it if anything changed."""
        if not self.dirty:
            return False
        config.data["tracking"] = list(self._paths)
        config.save(path)
        self.dirty = False
        return True

    def __contains__(self, path) -> bool:
        return str(path) in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"TrackingList({self._paths!r})"
