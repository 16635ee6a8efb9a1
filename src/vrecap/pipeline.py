import asyncio
from pathlib import Path
from typing import Protocol

import httpx

from vrecap import convert, errors, recap, runtime, transcribe, types as t


class Converter(Protocol):
    async def run(self, segment: t.SegmentDescriptor, file_bytes: bytes, file_name: str) -> Path: ...


class SegmentPipeline:
    def __init__(self, converter: Converter, transcriber: transcribe.Transcriber, recapper: recap.Recapper):
        self._converter = converter
        self._transcriber = transcriber
        self._recapper = recapper

    async def execute(self, segment: t.SegmentDescriptor, file_bytes: bytes, file_name: str) -> t.Outcome:
        tag = f"[part {segment.index}]"
        try:
            audio_path = await self._converter.run(segment, file_bytes, file_name)
            print(f"{tag} Transcribing {audio_path}...")
            transcript = await asyncio.to_thread(self._transcriber.transcribe, audio_path)
            print(f"{tag} Recapping ({len(transcript)} chars)...")
            summary = await asyncio.to_thread(self._recapper.recap, transcript)
        except errors.PipelineError as exc:
            print(f"{tag} FAILED: {exc}")
            return t.Failure(segment_index=segment.index, kind=exc.kind, message=str(exc))
        print(f"{tag} Done: {summary.title}")
        return t.Success(t.TranscriptionResult(
            segment_index=segment.index,
            time_range=(segment.start_seconds, segment.end_seconds),
            raw_transcript=transcript,
            recap_title=summary.title,
            recap_body=summary.body,
        ))


def create(
    output_dir: Path | None = None,
    client: httpx.AsyncClient | None = None,
) -> SegmentPipeline:
    converter = convert.ConversionJobClient(
        api_key=runtime.freeconvert_key() or "",
        output_dir=output_dir or runtime.OUTPUT_DIR,
        base_url=runtime.FREECONVERT_URL,
        client=client,
        poll_interval=runtime.POLL_INTERVAL,
        max_polls=runtime.MAX_POLLS,
        retries=runtime.RETRIES,
    )
    return SegmentPipeline(converter, transcribe.create(), recap.ClaudeRecapper())
