from __future__ import annotations

from pathlib import Path

import pytest

from chat_tts.adapters import InMemorySettingsProvider
from chat_tts.options import RelayConfig


@pytest.fixture
def relay_config(tmp_path: Path) -> RelayConfig:
    provider = InMemorySettingsProvider(
        {
            "channels": "#general",
            "allowed_tags": "irc_privmsg",
            "ignored_nicks": "weechat",
            "mute": "off",
            "audio_temp_dir": str(tmp_path),
        }
    )
    return RelayConfig(provider)
