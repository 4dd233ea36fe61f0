"""Error kinds raised along the synthesis and playback path."""


class PlaybackError(RuntimeError):
    """Base class for failures confined to a single playback attempt."""


class PlayerNotFound(PlaybackError):
    """Raised when the player executable cannot be resolved on PATH."""


class SynthesisError(PlaybackError):
    """Raised when the speech synthesis backend fails to return audio."""


class WriteError(PlaybackError):
    """Raised when synthesized audio cannot be written to the temp directory."""


class PlaybackProcessError(PlaybackError):
    """Raised or reported when the player process fails to start or exits non-zero."""
