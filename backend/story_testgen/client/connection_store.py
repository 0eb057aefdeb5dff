"""
Persistence port for the saved Jira connection.

The browser UI keeps the connection in local storage under ``jiraConnection``.
Python callers pass a ConnectionStore explicitly instead, so nothing in the
generation or prompt code depends on where credentials live.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError, constr

from story_testgen.schemas.testcase import CamelModel

logger = logging.getLogger(__name__)

CONNECTION_KEY = "jiraConnection"


class JiraConnection(CamelModel):
    base_url: constr(min_length=1)
    email: constr(min_length=1)
    api_key: constr(min_length=1)
    project_key: Optional[str] = None


class ConnectionStore(ABC):
    """Key/value string storage with read / write / clear."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def clear(self, key: str) -> None:
        ...


class MemoryConnectionStore(ConnectionStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileConnectionStore(ConnectionStore):
    """
    Stores entries in one JSON object on disk.

    An unreadable or non-object file is treated as empty and is replaced on
    the next write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.debug("Ignoring unreadable connection store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def read(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def clear(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


def load_connection(store: ConnectionStore) -> Optional[JiraConnection]:
    """
    Return the saved connection, or None when not connected.

    Corrupted or incomplete entries are removed from the store.
    """
    raw = store.read(CONNECTION_KEY)
    if not raw:
        return None
    try:
        return JiraConnection.model_validate_json(raw)
    except ValidationError:
        logger.debug("Discarding invalid saved Jira connection")
        store.clear(CONNECTION_KEY)
        return None


def save_connection(store: ConnectionStore, connection: JiraConnection) -> None:
    store.write(CONNECTION_KEY, connection.model_dump_json(by_alias=True, exclude_none=True))


def clear_connection(store: ConnectionStore) -> None:
    store.clear(CONNECTION_KEY)
