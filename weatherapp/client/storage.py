"""
Key/value stores standing in for the browser's localStorage and
sessionStorage. Each store is one JSON file under the state directory.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)

LOCAL_FILE = "local.json"
SESSION_FILE = "session.json"


class JsonStore:
    """
    String values under string keys, kept in one JSON file.

    The file is the source of truth: every read goes to disk and every
    write merges into what is on disk, so several stores (or processes)
    sharing a path see each other's keys.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("store_unreadable", path=str(self.path), error=str(e))
            return {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


def local_store(state_dir: Path | str) -> JsonStore:
    return JsonStore(Path(state_dir) / LOCAL_FILE)


def session_store(state_dir: Path | str) -> JsonStore:
    return JsonStore(Path(state_dir) / SESSION_FILE)
