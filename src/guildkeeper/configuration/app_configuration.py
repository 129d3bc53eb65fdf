from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict, List
import yaml

from guildkeeper.configuration.database_settings import DatabaseSettings
from guildkeeper.datatypes.guild_config import DEFAULT_MAX_MESSAGE_LENGTH
from guildkeeper.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml")
DEFAULT_LANGS = ["en"]


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``config/app_config.yml``, exposes
    dictionary-like access helpers and typed shortcuts for the settings the
    services need. Uses fcntl file locks for safe concurrent access across
    processes.
    """

    def __init__(self, config_path: Path = CONFIG_PATH) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error("[APP CONFIGURATION] Config %s is not a mapping; ignoring it", self.config_path)
            return {}
        return data

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the cached configuration mapping. Callers should not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def database(self) -> DatabaseSettings:
        settings = self._data.get("database", {})
        if not isinstance(settings, dict):
            settings = {}
        return DatabaseSettings(settings)

    @property
    def max_message_length(self) -> int:
        """Return the maximum length of welcome/goodbye messages.

        Default is 2000 characters, the platform's message limit.
        """
        messages = self._data.get("messages", {})
        if isinstance(messages, dict):
            try:
                value = int(messages.get("max_length", DEFAULT_MAX_MESSAGE_LENGTH))
            except (TypeError, ValueError):
                return DEFAULT_MAX_MESSAGE_LENGTH
            if value >= 0:
                return value
        return DEFAULT_MAX_MESSAGE_LENGTH

    @property
    def allowed_langs(self) -> List[str]:
        """Return the languages the service offers to guilds."""
        langs = self._data.get("allowed_langs")
        if isinstance(langs, list) and all(isinstance(lang, str) for lang in langs):
            return list(langs)
        return list(DEFAULT_LANGS)
