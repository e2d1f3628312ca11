"""Client-side persisted state: a JSON key/value file.

Stands in for browser local storage: every key is read and written
independently, and an absent or corrupt file reads as empty.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)

RATE_KEY = "globalExchangeRate"
COLUMN_ORDER_KEY = "columnOrder"
VISIBLE_COLUMNS_KEY = "visibleColumns"
FONT_SIZE_KEY = "fontSize"


class LocalStateStore:
    """Manages the local state file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Local state unreadable, using defaults", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        os.makedirs(self.path.parent, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
        logger.info("Local state cleared", path=str(self.path))
