"""Text-to-speech backend powered by Google Cloud Text-to-Speech."""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any

from chat_tts.errors import SynthesisError

from .interfaces import SpeechSynthesizer


@dataclass(slots=True)
class GoogleCloudSpeechSynthesizer(SpeechSynthesizer):
    """Synthesize speech through the Google Cloud API.

    With an empty ``keyfile`` the client falls back to application default
    credentials. Requests are billed to the account behind the credentials.
    """

    keyfile: str = ""
    _texttospeech: Any = field(init=False, repr=False)
    _client: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            self._texttospeech = importlib.import_module("google.cloud.texttospeech")
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Google TTS backend unavailable. Install extras with: pip install 'chat-tts[google]'"
            ) from exc

        client_cls = self._texttospeech.TextToSpeechClient
        try:
            self._client = client_cls.from_service_account_file(self.keyfile) if self.keyfile else client_cls()
        except Exception as exc:  # noqa: BLE001 - missing credentials, unreadable keyfile, ...
            raise RuntimeError(f"{type(exc).__name__}: {exc}") from exc

    def synthesize(self, text: str, language_code: str = "en-US", audio_format: str = "MP3") -> bytes:
        tts = self._texttospeech
        try:
            encoding = tts.AudioEncoding[audio_format.upper()]
        except KeyError as exc:
            raise SynthesisError(f"Unsupported audio format: {audio_format}") from exc

        try:
            response = self._client.synthesize_speech(
                input=tts.SynthesisInput(text=text),
                voice=tts.VoiceSelectionParams(language_code=language_code),
                audio_config=tts.AudioConfig(audio_encoding=encoding),
            )
        except Exception as exc:  # noqa: BLE001 - network, auth and quota errors all surface here.
            raise SynthesisError(f"{type(exc).__name__}: {exc}") from exc

        if not response.audio_content:
            raise SynthesisError("Synthesis returned no audio content")
        return bytes(response.audio_content)
