"""Speaker: plays replies through a SpeechOutput with a sticky voice choice."""

from __future__ import annotations

import logging
from collections.abc import Callable

from aurora.errors import SpeechError
from aurora.speech.base import SpeechOutput, Voice, select_voice

logger = logging.getLogger(__name__)


class Speaker:
    """Speaks text, re-resolving the voice when the chosen one disappears.

    ``on_start``/``on_end``/``on_error`` mirror the playback lifecycle so a
    frontend can show a "speaking" indicator.
    """

    def __init__(
        self,
        output: SpeechOutput,
        *,
        on_start: Callable[[], None] | None = None,
        on_end: Callable[[], None] | None = None,
        on_error: Callable[[SpeechError], None] | None = None,
    ) -> None:
        self._output = output
        self._voice: Voice | None = None
        self.on_start = on_start
        self.on_end = on_end
        self.on_error = on_error
        self.speaking = False

    @property
    def voice(self) -> Voice | None:
        return self._voice

    async def _resolve_voice(self) -> Voice | None:
        available = await self._output.voices()
        if self._voice is not None and self._voice in available:
            return self._voice
        voice = select_voice(available)
        if voice != self._voice:
            logger.info("Selected voice: %s", voice.name if voice else "system default")
        self._voice = voice
        return voice

    def _report(self, error: SpeechError) -> None:
        logger.error("Speech synthesis error: %s", error)
        if self.on_error:
            self.on_error(error)

    async def speak(self, text: str) -> None:
        """Play ``text``. Raises SpeechError if playback fails."""
        if not text.strip():
            return
        try:
            voice = await self._resolve_voice()
            self.speaking = True
            if self.on_start:
                self.on_start()
            await self._output.speak(text, voice)
        except SpeechError as exc:
            self._report(exc)
            raise
        except Exception as exc:
            error = SpeechError(str(exc))
            self._report(error)
            raise error from exc
        finally:
            self.speaking = False

        if self.on_end:
            self.on_end()
