"""Contract for text-to-speech backends."""

from typing import Protocol


class SpeechSynthesizer(Protocol):
    """Converts text into encoded audio bytes."""

    def synthesize(self, text: str, language_code: str = "en-US", audio_format: str = "MP3") -> bytes:
        """Return playable audio bytes; raise ``SynthesisError`` on backend failure."""
