"""Decides whether an incoming message is read aloud.

Checks run cheapest first: settings-only checks (mute, tag type) come before
any per-message parsing, since they reject the bulk of chat traffic.
"""

from __future__ import annotations

from collections.abc import Iterable

from chat_tts.models import REJECTED, AdmissionDecision, Admitted, IncomingMessage
from chat_tts.options import RelayOptions

ANONYMOUS_SENDER = "anon"
NICK_TAG_PREFIX = "nick_"


def extract_sender(tags: Iterable[str]) -> str:
    """Return ``<name>`` from the first ``nick_<name>`` tag, or ``anon``."""
    for tag in tags:
        if tag.startswith(NICK_TAG_PREFIX):
            return tag[len(NICK_TAG_PREFIX) :] or ANONYMOUS_SENDER
    return ANONYMOUS_SENDER


def decide(message: IncomingMessage, options: RelayOptions) -> AdmissionDecision:
    if options.mute:
        return REJECTED

    if options.allowed_tags.isdisjoint(message.tags):
        return REJECTED

    sender = extract_sender(message.tags)
    if sender in options.ignored_nicks:
        return REJECTED

    if message.channel not in options.channels:
        return REJECTED

    return Admitted(sender=sender, text=message.text)
