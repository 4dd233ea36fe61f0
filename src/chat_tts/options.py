"""Relay options read from the host settings provider.

Every recognized option has a string default that is written to the provider
the first time the relay starts and the option is still unset. After that the
stored value wins, so user edits survive restarts.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from chat_tts.adapters import SettingsProvider
from chat_tts.models import split_csv
from chat_tts.notifier import StatusNotifier

DEFAULT_OPTIONS: dict[str, str] = {
    "channels": "",
    "allowed_tags": "irc_privmsg",
    "ignored_nicks": "weechat",
    "mute": "off",
    "audio_temp_dir": "/tmp/",
    "keyfile": "",
}

MUTE_ON = "on"
MUTE_OFF = "off"

_logger = logging.getLogger("chat_tts.options")


def mute_status_line(muted: bool) -> str:
    return f"tts mute toggled {MUTE_ON if muted else MUTE_OFF}"


class RelayOptions(BaseModel):
    """Typed view of the relay options, one field per recognized option."""

    model_config = ConfigDict(frozen=True)

    channels: frozenset[str] = frozenset()
    allowed_tags: frozenset[str] = frozenset({"irc_privmsg"})
    ignored_nicks: frozenset[str] = frozenset({"weechat"})
    mute: bool = False
    audio_temp_dir: Path = Path("/tmp/")
    keyfile: str = ""

    @classmethod
    def from_values(cls, values: dict[str, str | None]) -> RelayOptions:
        merged = {name: default if values.get(name) is None else values[name] for name, default in DEFAULT_OPTIONS.items()}
        return cls(
            channels=frozenset(split_csv(merged["channels"])),
            allowed_tags=frozenset(split_csv(merged["allowed_tags"])),
            ignored_nicks=frozenset(split_csv(merged["ignored_nicks"])),
            mute=merged["mute"].strip().lower() == MUTE_ON,
            audio_temp_dir=Path(merged["audio_temp_dir"] or DEFAULT_OPTIONS["audio_temp_dir"]).expanduser(),
            keyfile=merged["keyfile"].strip(),
        )


class RelayConfig:
    """Injected configuration shared by the admission filter and playback.

    Loaded once at startup; only ``toggle_mute`` writes back to the provider.
    """

    def __init__(self, provider: SettingsProvider, notifier: StatusNotifier | None = None) -> None:
        self._provider = provider
        self._notifier = notifier
        self.apply_defaults()
        self._options = self._read()

    @property
    def options(self) -> RelayOptions:
        return self._options

    @property
    def provider(self) -> SettingsProvider:
        return self._provider

    def apply_defaults(self) -> list[str]:
        """Write defaults for unset options and return the names that were set."""
        applied: list[str] = []
        for name, value in DEFAULT_OPTIONS.items():
            if self._provider.is_set(name):
                continue
            self._provider.set(name, value)
            applied.append(name)
            _logger.info("option_default_applied %s=%r", name, value, extra={"option": name, "value": value})
            if self._notifier is not None:
                self._notifier.info(f"Setting value '{name}' to '{value}'")
        return applied

    def set_option(self, name: str, value: str) -> RelayOptions:
        if name not in DEFAULT_OPTIONS:
            raise KeyError(f"Unknown option: {name}")
        self._provider.set(name, value)
        return self.reload()

    def toggle_mute(self) -> bool:
        """Flip ``mute`` between ``on`` and ``off``; return the new muted state."""
        current = (self._provider.get("mute") or MUTE_OFF).strip().lower()
        new_value = MUTE_OFF if current == MUTE_ON else MUTE_ON
        self._provider.set("mute", new_value)
        self.reload()
        return self._options.mute

    def reload(self) -> RelayOptions:
        self._options = self._read()
        return self._options

    def _read(self) -> RelayOptions:
        return RelayOptions.from_values({name: self._provider.get(name) for name in DEFAULT_OPTIONS})
