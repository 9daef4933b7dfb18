"""Configuration management."""

import json
import logging
import os
from typing import Optional

from .models import TranslatorConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Load and expose translator configuration."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = self._resolve_config_path(config_path)
        self._config: TranslatorConfig = TranslatorConfig()
        self._load_config()

    @staticmethod
    def _resolve_config_path(config_path: Optional[str]) -> str:
        if config_path:
            return config_path

        candidate = os.getenv("CONFIG_PATH")
        if candidate:
            return candidate

        return os.path.join("config", "translator.json")

    def _load_config(self):
        """Load translator configuration from JSON file."""
        if not os.path.exists(self.config_path):
            self._config = TranslatorConfig()
            logger.info("Config file %s not found, using built-in defaults", self.config_path)
            return

        try:
            with open(self.config_path, "r", encoding="utf-8-sig") as f:
                config_data = json.load(f)

            if not isinstance(config_data, dict):
                raise ValueError("Configuration root must be a JSON object")

            unknown = sorted(key for key in config_data if key not in TranslatorConfig.model_fields)
            if unknown:
                logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

            self._config = TranslatorConfig(**config_data)
            logger.info(
                "Loaded configuration from %s (%s model aliases, %s thinking models)",
                self.config_path,
                len(self._config.model_aliases),
                len(self._config.thinking_models),
            )

        except Exception as exc:
            logger.error("Failed to load config: %s", exc)
            raise

    def reload(self):
        """Reload configuration from file."""
        self._load_config()
        logger.info("Configuration reloaded")

    @property
    def config(self) -> TranslatorConfig:
        return self._config
