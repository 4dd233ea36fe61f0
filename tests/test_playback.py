from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest

from chat_tts import playback
from chat_tts.errors import PlaybackProcessError, PlayerNotFound, SynthesisError, WriteError
from chat_tts.models import ArtifactState, AudioArtifact, PlaybackJobStatus
from chat_tts.options import RelayConfig
from chat_tts.playback import PlaybackOrchestrator


class StubSynthesizer:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    def synthesize(self, text: str, language_code: str = "en-US", audio_format: str = "MP3") -> bytes:
        self.calls.append((text, language_code, audio_format))
        if self.error is not None:
            raise self.error
        return b"ID3fake-mp3"


def _orchestrator(
    config: RelayConfig,
    synthesizer: StubSynthesizer,
    *,
    exit_code: int = 0,
    errors: list | None = None,
) -> PlaybackOrchestrator:
    return PlaybackOrchestrator(
        synthesizer,
        config,
        player_executable=sys.executable,
        player_args=["-c", f"import sys; sys.exit({exit_code})"],
        on_error=errors.append if errors is not None else None,
    )


def test_successful_playback_deletes_artifact(relay_config: RelayConfig) -> None:
    synthesizer = StubSynthesizer()
    orchestrator = _orchestrator(relay_config, synthesizer)

    job = orchestrator.play("alice says, hello")

    assert job.artifact.path.parent == Path(relay_config.options.audio_temp_dir)
    assert job.wait(timeout=10)
    assert job.status == PlaybackJobStatus.SUCCEEDED
    assert job.returncode == 0
    assert job.artifact.state == ArtifactState.DELETED
    assert not job.artifact.path.exists()
    assert synthesizer.calls == [("alice says, hello", "en-US", "MP3")]
    assert orchestrator.list_recent_jobs()[0].id == job.id


def test_failed_player_keeps_artifact_and_reports(relay_config: RelayConfig) -> None:
    errors: list = []
    orchestrator = _orchestrator(relay_config, StubSynthesizer(), exit_code=3, errors=errors)

    job = orchestrator.play("bob says, hi")

    assert job.wait(timeout=10)
    assert job.status == PlaybackJobStatus.FAILED
    assert job.returncode == 3
    assert job.artifact.state == ArtifactState.ORPHANED
    assert job.artifact.path.read_bytes() == b"ID3fake-mp3"
    assert len(errors) == 1
    assert isinstance(errors[0], PlaybackProcessError)


def test_missing_player_fails_before_synthesis(relay_config: RelayConfig) -> None:
    synthesizer = StubSynthesizer()
    orchestrator = PlaybackOrchestrator(synthesizer, relay_config, player_executable="definitely-not-a-player-xyz")

    with pytest.raises(PlayerNotFound):
        orchestrator.play("anything")

    assert synthesizer.calls == []
    assert list(Path(relay_config.options.audio_temp_dir).iterdir()) == []


def test_synthesis_failures_are_wrapped(relay_config: RelayConfig) -> None:
    orchestrator = _orchestrator(relay_config, StubSynthesizer(error=ConnectionError("quota exceeded")))

    with pytest.raises(SynthesisError, match="quota exceeded"):
        orchestrator.play("anything")

    assert list(Path(relay_config.options.audio_temp_dir).iterdir()) == []


def test_unwritable_temp_dir_raises_write_error(relay_config: RelayConfig, tmp_path: Path) -> None:
    relay_config.set_option("audio_temp_dir", str(tmp_path / "missing" / "dir"))
    orchestrator = _orchestrator(relay_config, StubSynthesizer())

    with pytest.raises(WriteError):
        orchestrator.play("anything")


def test_concurrent_plays_use_distinct_paths(relay_config: RelayConfig) -> None:
    orchestrator = _orchestrator(relay_config, StubSynthesizer())
    barrier = threading.Barrier(2)
    jobs = []

    def _play(text: str) -> None:
        barrier.wait()
        jobs.append(orchestrator.play(text))

    threads = [threading.Thread(target=_play, args=(f"msg {i}",)) for i in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert orchestrator.wait_all(timeout=10)
    assert len({job.artifact.path for job in jobs}) == 2
    assert all(job.status == PlaybackJobStatus.SUCCEEDED for job in jobs)


def test_artifact_states_only_move_forward(tmp_path: Path) -> None:
    artifact = AudioArtifact.create(tmp_path)
    artifact.advance(ArtifactState.SYNTHESIZING)
    artifact.advance(ArtifactState.WRITTEN)

    with pytest.raises(ValueError):
        artifact.advance(ArtifactState.SYNTHESIZING)

    artifact.orphan()
    with pytest.raises(ValueError):
        artifact.advance(ArtifactState.DELETED)
    assert artifact.path.name == f"{artifact.token}.mp3"
    assert len(artifact.token) == 32


def test_launch_failure_orphans_artifact(relay_config: RelayConfig, monkeypatch) -> None:
    orchestrator = _orchestrator(relay_config, StubSynthesizer())

    def _refuse(*args, **kwargs):
        raise PermissionError("not executable")

    monkeypatch.setattr(playback.subprocess, "Popen", _refuse)

    with pytest.raises(PlaybackProcessError, match="not executable"):
        orchestrator.play("anything")

    job = orchestrator.list_recent_jobs()[0]
    assert job.status == PlaybackJobStatus.FAILED
    assert job.artifact.state == ArtifactState.ORPHANED
    assert job.artifact.path.read_bytes() == b"ID3fake-mp3"
    assert orchestrator.get_job(job.id) is job
    assert orchestrator.active_jobs() == []


def test_cleanup_failure_is_reported(relay_config: RelayConfig, monkeypatch) -> None:
    errors: list = []
    orchestrator = _orchestrator(relay_config, StubSynthesizer(), errors=errors)

    def _locked(self, missing_ok=False):
        raise PermissionError("read-only directory")

    monkeypatch.setattr(Path, "unlink", _locked)
    job = orchestrator.play("anything")

    assert job.wait(timeout=10)
    monkeypatch.undo()
    assert job.status == PlaybackJobStatus.FAILED
    assert job.returncode == 0
    assert job.artifact.state == ArtifactState.ORPHANED
    assert job.artifact.path.exists()
    assert isinstance(errors[0], PlaybackProcessError)
    assert "read-only directory" in str(errors[0])


def test_get_job_tracks_active_and_finished_jobs(relay_config: RelayConfig) -> None:
    orchestrator = PlaybackOrchestrator(
        StubSynthesizer(),
        relay_config,
        player_executable=sys.executable,
        player_args=["-c", "import sys, time; time.sleep(0.5)"],
    )

    job = orchestrator.play("slow")

    assert orchestrator.get_job(job.id) is job
    assert orchestrator.wait_all(timeout=10)
    assert orchestrator.get_job(job.id).status == PlaybackJobStatus.SUCCEEDED
    with pytest.raises(KeyError):
        orchestrator.get_job("unknown")


class TextSynthesizer(StubSynthesizer):
    def synthesize(self, text: str, language_code: str = "en-US", audio_format: str = "MP3") -> bytes:
        return "not bytes"


def test_partial_write_is_removed(relay_config: RelayConfig) -> None:
    orchestrator = _orchestrator(relay_config, TextSynthesizer())

    with pytest.raises(WriteError):
        orchestrator.play("anything")

    assert list(Path(relay_config.options.audio_temp_dir).iterdir()) == []
