"""CLI startup entrypoint for chat-tts."""

from __future__ import annotations

import json

import typer
from rich import print

from chat_tts.adapters import JsonFileSettingsProvider
from chat_tts.config import settings
from chat_tts.handler import MessageHandler
from chat_tts.models import IncomingMessage
from chat_tts.notifier import RichStatusNotifier, StatusNotifier
from chat_tts.options import DEFAULT_OPTIONS, RelayConfig, mute_status_line
from chat_tts.playback import PlaybackOrchestrator
from chat_tts.synthesis import SpeechSynthesizer
from chat_tts.telemetry import configure_logging

app = typer.Typer(help="Read chat messages aloud with text-to-speech")


def _build_config(notifier: StatusNotifier) -> RelayConfig:
    return RelayConfig(JsonFileSettingsProvider(settings.settings_file), notifier=notifier)


def _build_synthesizer(config: RelayConfig) -> SpeechSynthesizer:
    from chat_tts.synthesis.tts_google import GoogleCloudSpeechSynthesizer

    return GoogleCloudSpeechSynthesizer(keyfile=config.options.keyfile)


def _build_relay() -> tuple[MessageHandler, PlaybackOrchestrator]:
    configure_logging(settings.log_level)
    notifier = RichStatusNotifier()
    config = _build_config(notifier)

    try:
        synthesizer = _build_synthesizer(config)
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    orchestrator = PlaybackOrchestrator(
        synthesizer,
        config,
        player_executable=settings.player_executable,
        player_args=settings.player_args,
        language_code=settings.language_code,
        audio_format=settings.audio_format,
        on_error=notifier.error,
        max_recent_jobs=settings.recent_jobs,
    )
    return MessageHandler(config, orchestrator, notifier), orchestrator


@app.command()
def start() -> None:
    """Show runtime configuration and the current relay options."""
    config = _build_config(RichStatusNotifier())
    options = config.options
    print(
        {
            "app_name": settings.app_name,
            "settings_file": settings.settings_file,
            "player_executable": settings.player_executable,
            "language_code": settings.language_code,
            "channels": sorted(options.channels),
            "allowed_tags": sorted(options.allowed_tags),
            "ignored_nicks": sorted(options.ignored_nicks),
            "mute": options.mute,
            "audio_temp_dir": str(options.audio_temp_dir),
        }
    )


@app.command("options")
def list_options() -> None:
    """Print the stored relay options."""
    provider = JsonFileSettingsProvider(settings.settings_file)
    RelayConfig(provider, notifier=RichStatusNotifier())
    print(dict(provider.items()))


@app.command("set-option")
def set_option(name: str, value: str) -> None:
    """Store a relay option, e.g. ``set-option channels '#general,#ops'``."""
    config = _build_config(RichStatusNotifier())
    try:
        config.set_option(name, value)
    except KeyError:
        print({"error": f"Unknown option '{name}'", "known_options": list(DEFAULT_OPTIONS)})
        raise typer.Exit(code=1)
    print({name: config.provider.get(name)})


@app.command("toggle-mute")
def toggle_mute() -> None:
    """Flip the global mute switch."""
    notifier = RichStatusNotifier()
    muted = _build_config(notifier).toggle_mute()
    notifier.info(mute_status_line(muted))


@app.command()
def say(
    text: str,
    channel: str = typer.Option(..., help="Channel the message arrived on, e.g. '#general'"),
    nick: str = typer.Option(None, help="Sender nick; omitted senders are read as 'anon'"),
    tags: str = typer.Option("irc_privmsg", help="Comma separated message tags"),
    wait: bool = typer.Option(True, help="Wait for playback to finish before exiting"),
) -> None:
    """Run one message through admission, synthesis and playback."""
    handler, orchestrator = _build_relay()
    message_tags = [tag for tag in tags.split(",") if tag]
    if nick:
        message_tags.append(f"nick_{nick}")

    handler.handle(IncomingMessage(text=text, tags=tuple(message_tags), channel=channel))
    if wait:
        orchestrator.wait_all()
    print({"jobs": [_job_summary(job) for job in orchestrator.list_recent_jobs()]})


@app.command()
def relay(wait: bool = typer.Option(True, help="Wait for pending playback at end of input")) -> None:
    """Read JSON-lines message events from stdin and read qualifying ones aloud.

    Each line is an object with at least ``tags``, ``channel`` and ``text``.
    """
    handler, orchestrator = _build_relay()
    notifier = RichStatusNotifier()
    stdin = typer.get_text_stream("stdin")
    for line in stdin:
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            notifier.error(exc)
            continue
        handler.handle_event(payload)

    if wait:
        orchestrator.wait_all()


def _job_summary(job) -> dict:
    return {
        "id": job.id,
        "status": job.status.value,
        "returncode": job.returncode,
        "error": job.error,
    }


if __name__ == "__main__":
    app()
