from pathlib import Path
from typing import Any, Dict

DEFAULT_DB_PATH = "data/guildkeeper.db"


class DatabaseSettings:
    """Typed accessors for the ``database`` section of the app config.

    Like the rest of the configuration layer this tolerates missing or
    malformed values by falling back to defaults.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.data

    @property
    def path(self) -> Path:
        val = self.data.get("path")
        return Path(str(val) if val else DEFAULT_DB_PATH)

    @property
    def slow_query_ms(self) -> float:
        try:
            return float(self.data.get("slow_query_ms", 100.0))
        except (TypeError, ValueError):
            return 100.0
