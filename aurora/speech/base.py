"""Speech port: voice model, transcripts and the input/output protocols."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Voice:
    name: str
    lang: str  # BCP 47, e.g. "en-GB"
    female: bool = False


@dataclass(frozen=True)
class Transcript:
    """A finished speech-recognition result."""

    text: str
    confidence: float


@runtime_checkable
class SpeechOutput(Protocol):
    async def voices(self) -> list[Voice]:
        """Voices currently installed on the device."""
        ...

    async def speak(self, text: str, voice: Voice | None) -> None:
        """Play ``text``; return once playback has finished."""
        ...


@runtime_checkable
class SpeechInput(Protocol):
    async def transcribe(self, audio: bytes, mimetype: str) -> Transcript:
        """Recognize one recorded utterance and return its final transcript."""
        ...


def select_voice(voices: Sequence[Voice]) -> Voice | None:
    """Pick the preferred voice.

    Order: British English female, British English, any English female, any
    English, then whatever is first.
    """
    preferences = (
        lambda v: v.lang == "en-GB" and v.female,
        lambda v: v.lang == "en-GB",
        lambda v: v.lang.startswith("en") and v.female,
        lambda v: v.lang.startswith("en"),
    )
    for matches in preferences:
        for voice in voices:
            if matches(voice):
                return voice
    return voices[0] if voices else None
