"""
Agenda Assistant — Audio Transcriber.

Voice is the fastest capture method — speaking is faster than typing.
After transcription, text flows into the same assistant as typed messages.

This is the only module that talks to OpenAI directly for audio; OpenAI is
used here exclusively for Whisper transcription, whatever LLM_PROVIDER says.
"""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

from src.config import settings

logger = logging.getLogger(__name__)

_client: AsyncOpenAI | None = None


class TranscriptionError(Exception):
    """Raised when a voice message can't be turned into text."""


def _get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        if not settings.OPENAI_API_KEY:
            raise TranscriptionError("Voice input needs OPENAI_API_KEY to be set")
        _client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
    return _client


async def transcribe_audio(audio: bytes, filename: str = "voice.ogg") -> str:
    """Transcribe raw audio bytes using OpenAI Whisper.

    Args:
        audio: Encoded audio (OGG/Opus from Telegram, MP3, WebM, ...).
        filename: Name hint; Whisper uses the extension to pick a decoder.

    Returns:
        Transcribed text string (may be empty for silence).

    Raises:
        TranscriptionError: If the audio is empty or the Whisper call fails.
    """
    if not audio:
        raise TranscriptionError("Received an empty audio file")

    client = _get_client()
    kwargs = {}
    if settings.TRANSCRIPTION_LANGUAGE:
        kwargs["language"] = settings.TRANSCRIPTION_LANGUAGE

    try:
        response = await client.audio.transcriptions.create(
            model="whisper-1",
            file=(filename, audio),
            **kwargs,
        )
    except Exception as exc:
        logger.error("Whisper transcription failed for %s: %s", filename, exc)
        raise TranscriptionError(str(exc)) from exc

    text = response.text.strip()
    logger.info("Transcribed %d chars from %s (%d bytes)", len(text), filename, len(audio))
    return text
