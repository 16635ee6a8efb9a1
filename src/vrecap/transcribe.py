import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from vrecap import errors, runtime


@runtime_checkable
class Transcriber(Protocol):
    def transcribe(self, audio_path: Path) -> str: ...


class WhisperTranscriber:
    def __init__(self, model=None):
        self._model = model or runtime.ensure_whisper()

    def transcribe(self, audio_path: Path) -> str:
        try:
            raw_segments, _info = self._model.transcribe(str(audio_path))
            text = " ".join(seg.text.strip() for seg in raw_segments if seg.text.strip())
        except Exception as exc:
            raise errors.TranscriptionError(f"Whisper failed on {audio_path}: {exc}") from exc
        return text


class AssemblyAITranscriber:
    def __init__(self, api_key: str | None = None):
        import assemblyai as aai
        aai.settings.api_key = api_key or os.environ["ASSEMBLYAI_API_KEY"]
        self._aai = aai

    def transcribe(self, audio_path: Path) -> str:
        config = self._aai.TranscriptionConfig(
            speech_model=self._aai.SpeechModel.best,
            punctuate=True,
            format_text=True,
        )
        try:
            transcript = self._aai.Transcriber().transcribe(str(audio_path), config=config)
        except Exception as exc:
            raise errors.TranscriptionError(f"AssemblyAI request failed for {audio_path}: {exc}") from exc
        if transcript.status == self._aai.TranscriptStatus.error:
            raise errors.TranscriptionError(f"AssemblyAI transcription failed: {transcript.error}")
        return (transcript.text or "").strip()


def create(name: str | None = None) -> Transcriber:
    name = (name or runtime.TRANSCRIBER).lower()
    if name == "assemblyai":
        return AssemblyAITranscriber()
    if name == "whisper":
        return WhisperTranscriber()
    raise ValueError(f"Unknown transcriber: {name!r}. Valid options: assemblyai, whisper")
