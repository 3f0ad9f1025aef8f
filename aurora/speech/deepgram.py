"""SpeechInput backed by the Deepgram pre-recorded transcription API."""

from __future__ import annotations

import logging

import httpx

from aurora.config import settings
from aurora.errors import SpeechError
from aurora.speech.base import Transcript

logger = logging.getLogger(__name__)

LISTEN_URL = "https://api.deepgram.com/v1/listen"


class DeepgramInput:
    """Posts one recorded utterance to Deepgram and reads back the top alternative."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        language: str | None = None,
    ) -> None:
        self.api_key = api_key or settings.deepgram_api_key
        if not self.api_key:
            raise SpeechError("Deepgram API key required. Set DEEPGRAM_API_KEY.")
        self.model = model or settings.deepgram_model
        self.language = language or settings.deepgram_language

    async def transcribe(self, audio: bytes, mimetype: str) -> Transcript:
        params = {
            "model": self.model,
            "language": self.language,
            "punctuate": "true",
            "smart_format": "true",
        }
        headers = {"Authorization": f"Token {self.api_key}", "Content-Type": mimetype}
        try:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
                resp = await client.post(LISTEN_URL, params=params, headers=headers, content=audio)
        except httpx.HTTPError as exc:
            raise SpeechError(f"Deepgram request failed: {exc}") from exc

        if resp.status_code != 200:
            logger.error("Deepgram error: HTTP %d %s", resp.status_code, resp.text[:200])
            raise SpeechError(f"Deepgram returned HTTP {resp.status_code}")

        channels = resp.json().get("results", {}).get("channels") or [{}]
        alternatives = channels[0].get("alternatives") or [{}]
        best = alternatives[0]
        transcript = Transcript(
            text=best.get("transcript", "").strip(),
            confidence=float(best.get("confidence", 0.0)),
        )
        logger.info("Heard (%.2f): %s", transcript.confidence, transcript.text[:80])
        return transcript
