"""Key/value settings providers consumed by the relay configuration."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Protocol


class SettingsProvider(Protocol):
    """Host-side option store with string values."""

    def get(self, name: str) -> str | None:
        """Return the stored value, or ``None`` when the option is unset."""

    def set(self, name: str, value: str) -> None:
        """Store ``value`` under ``name``."""

    def is_set(self, name: str) -> bool:
        """Return whether ``name`` has a stored value."""


class InMemorySettingsProvider:
    """Dictionary-backed provider used by tests and one-shot commands."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        self._values[name] = str(value)

    def is_set(self, name: str) -> bool:
        return name in self._values


class JsonFileSettingsProvider:
    """Provider persisted as a single JSON object, rewritten on every ``set``.

    Reads pick up edits made by other processes (e.g. ``chat-tts toggle-mute``
    while ``chat-tts relay`` runs) by reloading when the file changes on disk.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._path = Path(file_path).expanduser()
        self._lock = threading.Lock()
        self._signature: tuple[int, int, int] | None = None
        self._values: dict[str, str] = {}
        self._refresh()

    def get(self, name: str) -> str | None:
        self._refresh()
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        self._refresh()
        with self._lock:
            self._values[name] = str(value)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(self._values, indent=2, sort_keys=True) + "\n", encoding="utf-8")
            tmp_path.replace(self._path)
            self._signature = self._stat()

    def is_set(self, name: str) -> bool:
        self._refresh()
        return name in self._values

    def items(self) -> list[tuple[str, str]]:
        self._refresh()
        return sorted(self._values.items())

    def _stat(self) -> tuple[int, int, int] | None:
        try:
            stat = self._path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size, stat.st_ino)

    def _refresh(self) -> None:
        with self._lock:
            signature = self._stat()
            if signature == self._signature:
                return
            self._values = self._load() if signature is not None else {}
            self._signature = signature

    def _load(self) -> dict[str, str]:
        payload = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        if not isinstance(payload, dict):
            raise ValueError(f"Settings file must contain a JSON object: {self._path}")
        return {str(key): str(value) for key, value in payload.items()}
