"""Configuration management for modshake."""

from pathlib import Path
from typing import Any, Optional
import yaml


class Config:
    """Configuration manager with lazy loading and defaults."""

    _instance: Optional["Config"] = None
    _config: dict = {}

    DEFAULT_PATH = Path("modshake.yaml")

    DEFAULT_CONFIG = {
        "project": {
            "name": "modshake"
        },
        "parsing": {
            "source_suffixes": [".ts", ".tsx", ".mts", ".cts", ".js", ".jsx", ".mjs", ".cjs"]
        },
        "resolve": {
            "extensions": [],
            "index_files": []
        },
        "analysis": {
            "usage_mode": "names",
            "max_cycles": 50
        },
        "logging": {
            "level": "WARNING",
            "file": None
        }
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path: Optional[Path] = None) -> None:
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = self.DEFAULT_PATH

        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
        else:
            self._config = {}
        self._loaded = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value using dot notation (e.g., 'resolve.extensions')."""
        if not getattr(self, "_loaded", False):
            self.load()

        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                # Try default config
                default_value = self.DEFAULT_CONFIG
                for dk in keys:
                    if isinstance(default_value, dict) and dk in default_value:
                        default_value = default_value[dk]
                    else:
                        return default
                return default_value

        return value

    @property
    def source_suffixes(self) -> list:
        """Get recognized source file suffixes."""
        return self.get("parsing.source_suffixes", [])

    @property
    def usage_mode(self) -> str:
        """Get the default usage mode for tree shaking."""
        return self.get("analysis.usage_mode", "names")

    def builder_config(self) -> dict:
        """Options for GraphBuilder."""
        return {
            "source_suffixes": self.source_suffixes,
            "extensions": self.get("resolve.extensions", []),
            "index_files": self.get("resolve.index_files", []),
        }


# Global config instance
config = Config()
