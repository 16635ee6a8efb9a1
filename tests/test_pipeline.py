import asyncio
from pathlib import Path

from conftest import FakeRecapper, FakeTranscriber
from vrecap import errors, pipeline, types as t

SEGMENT = t.SegmentDescriptor(index=3, start_seconds=60, end_seconds=65)


class StubConverter:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = []

    async def run(self, segment, file_bytes, file_name):
        self.calls.append((segment, file_name))
        if self.error:
            raise self.error
        return Path(f"/tmp/converted_part{segment.index}.mp3")


def test_execute_success():
    p = pipeline.SegmentPipeline(StubConverter(), FakeTranscriber(), FakeRecapper())

    outcome = asyncio.run(p.execute(SEGMENT, b"video", "clip.mp4"))

    assert outcome.ok
    assert outcome.segment_index == 3
    r = outcome.result
    assert r.time_range == (60, 65)
    assert r.raw_transcript == "spoken words from converted_part3.mp3"
    assert r.recap_title == "Recap of converted_part3.mp3"
    assert r.recap_body == "Scene one. Scene two."


def test_conversion_failure_short_circuits():
    transcriber = FakeTranscriber()
    p = pipeline.SegmentPipeline(
        StubConverter(errors.ConversionFailed("job-3", "error")), transcriber, FakeRecapper(),
    )

    outcome = asyncio.run(p.execute(SEGMENT, b"video", "clip.mp4"))

    assert not outcome.ok
    assert outcome == t.Failure(3, errors.ErrorKind.CONVERSION_FAILED, "Conversion job job-3 ended with status 'error'")
    assert transcriber.calls == []


def test_transcription_failure_reports_kind():
    p = pipeline.SegmentPipeline(
        StubConverter(), FakeTranscriber(fail_on=("converted_part3.mp3",)), FakeRecapper(),
    )
    outcome = asyncio.run(p.execute(SEGMENT, b"video", "clip.mp4"))
    assert outcome.kind == errors.ErrorKind.TRANSCRIPTION_ERROR
    assert "no speech" in outcome.message


def test_recap_failure_reports_kind():
    class EmptyRecapper:
        def recap(self, transcript):
            raise errors.MalformedResponse("Recap response was empty")

    p = pipeline.SegmentPipeline(StubConverter(), FakeTranscriber(), EmptyRecapper())
    outcome = asyncio.run(p.execute(SEGMENT, b"video", "clip.mp4"))
    assert outcome.kind == errors.ErrorKind.MALFORMED_RESPONSE
