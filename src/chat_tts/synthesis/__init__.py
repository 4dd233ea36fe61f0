"""Speech synthesis boundaries."""

from .interfaces import SpeechSynthesizer

__all__ = ["SpeechSynthesizer"]
