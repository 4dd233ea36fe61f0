from __future__ import annotations

import secrets
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any


def split_csv(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a comma separated value into trimmed, non-empty items."""
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(str(item).strip() for item in items if item and str(item).strip())


@dataclass(frozen=True, slots=True)
class IncomingMessage:
    """One chat event as delivered by the host."""

    text: str
    tags: tuple[str, ...] = ()
    channel: str = ""
    server: str = ""
    away: bool = False

    @classmethod
    def from_event(cls, payload: Mapping[str, Any]) -> IncomingMessage:
        if "text" not in payload:
            raise ValueError("Message event is missing required field 'text'")
        return cls(
            text=str(payload["text"]),
            tags=split_csv(payload.get("tags")),
            channel=str(payload.get("channel") or ""),
            server=str(payload.get("server") or ""),
            away=bool(payload.get("away", False)),
        )


@dataclass(frozen=True, slots=True)
class Admitted:
    sender: str
    text: str


@dataclass(frozen=True, slots=True)
class Rejected:
    pass


REJECTED = Rejected()

AdmissionDecision = Admitted | Rejected


class ArtifactState(int, Enum):
    """Lifecycle of a temporary audio file; values only move forward."""

    CREATED = 0
    SYNTHESIZING = 1
    WRITTEN = 2
    PLAYING = 3
    DELETED = 4
    ORPHANED = 5


_TERMINAL_STATES = frozenset({ArtifactState.DELETED, ArtifactState.ORPHANED})


@dataclass(slots=True)
class AudioArtifact:
    """Single-use temp file holding synthesized audio for one playback."""

    token: str
    path: Path
    state: ArtifactState = ArtifactState.CREATED

    @classmethod
    def create(cls, directory: str | Path, suffix: str = ".mp3") -> AudioArtifact:
        token = secrets.token_hex(16)
        return cls(token=token, path=Path(directory) / f"{token}{suffix}")

    def advance(self, state: ArtifactState) -> None:
        if self.state in _TERMINAL_STATES or state <= self.state:
            raise ValueError(f"Artifact {self.token} cannot move from {self.state.name} to {state.name}")
        self.state = state

    def orphan(self) -> None:
        if self.state not in _TERMINAL_STATES:
            self.state = ArtifactState.ORPHANED


class PlaybackJobStatus(str, Enum):
    """Lifecycle states for dispatched player processes."""

    PLAYING = "playing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class PlaybackJob:
    """Tracked handle for one player process and the artifact it plays."""

    id: str
    text: str
    artifact: AudioArtifact
    submitted_at: datetime
    status: PlaybackJobStatus = PlaybackJobStatus.PLAYING
    finished_at: datetime | None = None
    returncode: int | None = None
    error: str | None = None
    _done: threading.Event = field(default_factory=threading.Event, init=False, repr=False, compare=False)

    def finish(self, status: PlaybackJobStatus, *, returncode: int | None = None, error: str | None = None) -> None:
        self.status = status
        self.returncode = returncode
        self.error = error
        self.finished_at = datetime.now(timezone.utc)
        self._done.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the player exits; return ``False`` on timeout."""
        return self._done.wait(timeout)
