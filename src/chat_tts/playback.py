"""Synthesis-to-speaker orchestration for admitted messages.

Every call to ``play`` owns one uniquely named temp file and one player
process. The process is watched from a background thread so the caller returns
as soon as the player is launched; a clean exit removes the file, a failed exit
leaves it on disk for inspection.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
import time
from collections import deque
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from chat_tts.errors import PlaybackError, PlaybackProcessError, PlayerNotFound, SynthesisError, WriteError
from chat_tts.models import ArtifactState, AudioArtifact, PlaybackJob, PlaybackJobStatus
from chat_tts.options import RelayConfig
from chat_tts.synthesis import SpeechSynthesizer

ErrorCallback = Callable[[PlaybackError], None]


class PlaybackOrchestrator:
    """Writes synthesized audio to disk and plays it with an external player."""

    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        config: RelayConfig,
        *,
        player_executable: str = "mpg123",
        player_args: Sequence[str] = (),
        language_code: str = "en-US",
        audio_format: str = "MP3",
        on_error: ErrorCallback | None = None,
        max_recent_jobs: int = 100,
        logger: logging.Logger | None = None,
    ) -> None:
        self._synthesizer = synthesizer
        self._config = config
        self._player_executable = player_executable
        self._player_args = list(player_args)
        self._language_code = language_code
        self._audio_format = audio_format
        self._on_error = on_error
        self._logger = logger or logging.getLogger("chat_tts.playback")

        self._lock = threading.Lock()
        self._active: dict[str, PlaybackJob] = {}
        self._recent: deque[PlaybackJob] = deque(maxlen=max_recent_jobs)

    def resolve_player(self) -> str:
        player = shutil.which(self._player_executable)
        if player is None:
            raise PlayerNotFound(f"{self._player_executable} executable not found in $PATH.")
        return player

    def play(self, text: str) -> PlaybackJob:
        """Synthesize ``text`` and start playing it without waiting for the player."""
        player = self.resolve_player()

        artifact = AudioArtifact.create(self._config.options.audio_temp_dir, suffix=f".{self._audio_format.lower()}")
        artifact.advance(ArtifactState.SYNTHESIZING)
        try:
            audio = self._synthesizer.synthesize(
                text,
                language_code=self._language_code,
                audio_format=self._audio_format,
            )
        except SynthesisError:
            raise
        except Exception as exc:  # noqa: BLE001 - any backend failure is a synthesis failure.
            raise SynthesisError(f"{type(exc).__name__}: {exc}") from exc

        try:
            with artifact.path.open("xb") as handle:
                handle.write(audio)
        except (OSError, TypeError) as exc:
            artifact.orphan()
            if not isinstance(exc, FileExistsError):
                self._discard_partial(artifact)
            raise WriteError(f"Unable to write {artifact.path}: {exc}") from exc
        artifact.advance(ArtifactState.WRITTEN)

        job = PlaybackJob(
            id=artifact.token,
            text=text,
            artifact=artifact,
            submitted_at=datetime.now(timezone.utc),
        )
        try:
            process = subprocess.Popen(
                [player, *self._player_args, str(artifact.path)],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            artifact.orphan()
            error = PlaybackProcessError(f"Unable to start {player}: {exc}")
            self._complete(job, PlaybackJobStatus.FAILED, error=str(error))
            raise error from exc

        artifact.advance(ArtifactState.PLAYING)
        with self._lock:
            self._active[job.id] = job

        watcher = threading.Thread(
            target=self._watch,
            args=(job, process),
            name=f"playback-{job.id[:8]}",
            daemon=True,
        )
        watcher.start()
        self._logger.info(
            "playback_started job %s pid %s path %s",
            job.id,
            process.pid,
            artifact.path,
            extra={"job_id": job.id, "path": str(artifact.path), "pid": process.pid},
        )
        return job

    def get_job(self, job_id: str) -> PlaybackJob:
        with self._lock:
            if job_id in self._active:
                return self._active[job_id]
            for job in self._recent:
                if job.id == job_id:
                    return job
        raise KeyError(f"Unknown playback job id: {job_id}")

    def active_jobs(self) -> list[PlaybackJob]:
        with self._lock:
            return list(self._active.values())

    def list_recent_jobs(self, limit: int = 20) -> list[PlaybackJob]:
        """Return finished jobs, newest first."""
        with self._lock:
            return list(self._recent)[:limit]

    def wait_all(self, timeout: float | None = None) -> bool:
        """Wait for every active job; return ``False`` if any is still playing."""
        deadline = None if timeout is None else time.monotonic() + timeout
        for job in self.active_jobs():
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not job.wait(remaining):
                return False
        return True

    def _watch(self, job: PlaybackJob, process: subprocess.Popen) -> None:
        returncode = process.wait()
        artifact = job.artifact
        if returncode == 0:
            try:
                artifact.path.unlink(missing_ok=True)
            except OSError as exc:
                artifact.orphan()
                self._fail(job, PlaybackProcessError(f"Unable to remove {artifact.path}: {exc}"), returncode)
                return
            artifact.advance(ArtifactState.DELETED)
            self._complete(job, PlaybackJobStatus.SUCCEEDED, returncode=returncode)
            self._logger.info("artifact_deleted job %s path %s", job.id, artifact.path, extra={"job_id": job.id, "path": str(artifact.path)})
            return

        artifact.orphan()
        self._fail(
            job,
            PlaybackProcessError(f"Player exited with code {returncode}; kept {artifact.path}"),
            returncode,
        )

    def _fail(self, job: PlaybackJob, error: PlaybackProcessError, returncode: int) -> None:
        self._logger.error(
            "playback_failed job %s returncode %s: %s",
            job.id,
            returncode,
            error,
            extra={"job_id": job.id, "returncode": returncode, "path": str(job.artifact.path)},
        )
        if self._on_error is not None:
            try:
                self._on_error(error)
            except Exception:  # noqa: BLE001 - reporting must not kill the watcher thread.
                self._logger.exception("playback_error_report_failed", extra={"job_id": job.id})
        self._complete(job, PlaybackJobStatus.FAILED, returncode=returncode, error=str(error))

    def _discard_partial(self, artifact: AudioArtifact) -> None:
        try:
            artifact.path.unlink(missing_ok=True)
        except OSError:
            self._logger.warning("partial_artifact_kept %s", artifact.path, extra={"path": str(artifact.path)})

    def _complete(
        self,
        job: PlaybackJob,
        status: PlaybackJobStatus,
        *,
        returncode: int | None = None,
        error: str | None = None,
    ) -> None:
        with self._lock:
            job.finish(status, returncode=returncode, error=error)
            self._active.pop(job.id, None)
            self._recent.appendleft(job)
