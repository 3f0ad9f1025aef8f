"""Text-to-speech and speech-recognition ports."""

from aurora.speech.base import SpeechInput, SpeechOutput, Transcript, Voice, select_voice
from aurora.speech.deepgram import DeepgramInput
from aurora.speech.say import SayOutput
from aurora.speech.speaker import Speaker

__all__ = [
    "DeepgramInput",
    "SayOutput",
    "Speaker",
    "SpeechInput",
    "SpeechOutput",
    "Transcript",
    "Voice",
    "select_voice",
]
