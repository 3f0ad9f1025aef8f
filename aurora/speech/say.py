"""SpeechOutput backed by the macOS ``say`` command."""

from __future__ import annotations

import asyncio
import logging
import re

from aurora.config import settings
from aurora.errors import SpeechError
from aurora.speech.base import Voice

logger = logging.getLogger(__name__)

# `say -v ?` does not report gender; these built-in voices are female.
FEMALE_VOICES = frozenset({
    "Allison",
    "Ava",
    "Fiona",
    "Karen",
    "Kate",
    "Moira",
    "Samantha",
    "Serena",
    "Susan",
    "Tessa",
    "Veena",
    "Victoria",
    "Zoe",
})

# "Daniel              en_GB    # Hello! My name is Daniel."
_VOICE_LINE_RE = re.compile(r"^(?P<name>.+?)\s+(?P<lang>[a-z]{2,3}[_-][A-Za-z0-9]+)\s+#")


def parse_voices(listing: str) -> list[Voice]:
    voices = []
    for line in listing.splitlines():
        match = _VOICE_LINE_RE.match(line.strip())
        if not match:
            continue
        name = match.group("name").strip()
        voices.append(
            Voice(
                name=name,
                lang=match.group("lang").replace("_", "-"),
                female=name.split(" (")[0] in FEMALE_VOICES,
            )
        )
    return voices


class SayOutput:
    """Runs ``say`` in a subprocess; one utterance at a time."""

    def __init__(self, rate: int | None = None) -> None:
        self.rate = rate or settings.speech_rate

    async def _run(self, *args: str) -> tuple[int, bytes, bytes]:
        try:
            process = await asyncio.create_subprocess_exec(
                "say",
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            msg = f"Cannot run the say command: {exc}"
            raise SpeechError(msg) from exc
        stdout, stderr = await process.communicate()
        return process.returncode or 0, stdout, stderr

    async def voices(self) -> list[Voice]:
        code, stdout, stderr = await self._run("-v", "?")
        if code != 0:
            msg = f"Listing voices failed: {stderr.decode(errors='replace').strip()}"
            raise SpeechError(msg)
        return parse_voices(stdout.decode(errors="replace"))

    async def speak(self, text: str, voice: Voice | None) -> None:
        args = ["-r", str(self.rate)]
        if voice is not None:
            args = ["-v", voice.name, *args]
        code, _, stderr = await self._run(*args, text)
        if code != 0:
            msg = f"say exited with {code}: {stderr.decode(errors='replace').strip()}"
            raise SpeechError(msg)
