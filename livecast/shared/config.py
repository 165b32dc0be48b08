"""
Layered environment configuration.

Later layers override earlier ones:
1) `env.example` (committed placeholders)
2) `env.local` (developer overrides, never committed)
3) process environment
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_FILES = ("env.example", "env.local")

_TRUTHY = {"true", "1", "yes", "on"}


def load_layers(root: Path = PROJECT_ROOT) -> dict[str, str | None]:
    values: dict[str, str | None] = {}
    for name in ENV_FILES:
        path = root / name
        if not path.exists():
            continue
        values.update(dotenv_values(path))
        logger.info("Loaded environment layer {}", path)
    values.update(os.environ)
    return values


class EnvironConfig:
    """Process-wide view of the merged environment layers."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._config = load_layers()
            cls._instance = instance
        return cls._instance

    def get(self, key: str, default: str | None = None) -> str | None:
        """Raw value, or ``default`` when the key is unset or blank."""
        value = (self._config.get(key) or "").strip()
        return value or default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        return default if value is None else value.lower() in _TRUTHY

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        return default if value is None else int(value)

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        return default if value is None else float(value)

    def get_list(self, key: str, default: str = "") -> list[str]:
        """Comma separated value as a list of non-empty items."""
        raw = self.get(key, default) or ""
        return [item.strip() for item in raw.split(",") if item.strip()]


config = EnvironConfig()
