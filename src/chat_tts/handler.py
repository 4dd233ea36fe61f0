"""Per-message entry point called by the host for every chat line."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from chat_tts.admission import decide
from chat_tts.models import Admitted, IncomingMessage, PlaybackJob
from chat_tts.notifier import StatusNotifier
from chat_tts.options import RelayConfig, mute_status_line
from chat_tts.sanitizer import sanitize

RC_OK = 0


class Player(Protocol):
    """Anything that can speak a prepared line of text."""

    def play(self, text: str) -> PlaybackJob:
        ...


def compose_utterance(sender: str, text: str) -> str:
    return f"{sender} says, {sanitize(text)}"


class MessageHandler:
    """Runs admission, sanitizing and playback for one message at a time.

    ``handle`` never raises: the host event loop must keep running whatever
    happens to a single message, so failures become a log record and an error
    status line.
    """

    def __init__(
        self,
        config: RelayConfig,
        player: Player,
        notifier: StatusNotifier,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._player = player
        self._notifier = notifier
        self._logger = logger or logging.getLogger("chat_tts.handler")

    def handle(self, message: IncomingMessage) -> int:
        try:
            # Options are re-read per message so edits from other processes apply at once.
            decision = decide(message, self._config.reload())
            if not isinstance(decision, Admitted):
                return RC_OK

            utterance = compose_utterance(decision.sender, decision.text)
            job = self._player.play(utterance)
            self._logger.info(
                "message_dispatched from %s on %s as job %s",
                decision.sender,
                message.channel,
                job.id,
                extra={"sender": decision.sender, "channel": message.channel, "job_id": job.id},
            )
        except Exception as exc:  # noqa: BLE001 - no failure may reach the host event loop.
            self._report(exc, channel=message.channel)
        return RC_OK

    def handle_event(self, payload: Mapping[str, Any]) -> int:
        """Host callback taking the raw ``{tags, channel, text}`` event mapping."""
        if not isinstance(payload, Mapping):
            self._report(TypeError(f"Message event must be a mapping, got {type(payload).__name__}"), channel="")
            return RC_OK
        try:
            message = IncomingMessage.from_event(payload)
        except Exception as exc:  # noqa: BLE001
            self._report(exc, channel=str(payload.get("channel", "")))
            return RC_OK
        return self.handle(message)

    def toggle_mute(self) -> bool:
        muted = self._config.toggle_mute()
        self._notifier.info(mute_status_line(muted))
        return muted

    def _report(self, exc: Exception, *, channel: str) -> None:
        self._logger.warning(
            "message_failed on %s: %s: %s",
            channel or "-",
            type(exc).__name__,
            exc,
            extra={"error_kind": type(exc).__name__, "error": str(exc), "channel": channel},
        )
        self._notifier.error(exc)
