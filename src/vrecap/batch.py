import asyncio
import time

from vrecap import errors, plan, pipeline, types as t


class Orchestrator:
    """Fans one upload out into concurrent segment pipelines.

    Results land in a slot array indexed by segment, so completion order never
    affects output order. ``run`` is all-or-nothing: any failed segment fails
    the whole upload with the lowest-index failure.
    """

    def __init__(
        self,
        segment_pipeline: pipeline.SegmentPipeline,
        segment_length: int = plan.SEGMENT_LENGTH_SECONDS,
        concurrency: int | None = None,
    ):
        self._pipeline = segment_pipeline
        self._segment_length = segment_length
        self._concurrency = concurrency

    async def outcomes(self, total_duration: int, file_bytes: bytes, file_name: str) -> list[t.Outcome]:
        segments = plan.plan_segments(total_duration, self._segment_length)
        slots: list[t.Outcome | None] = [None] * len(segments)
        sem = asyncio.Semaphore(self._concurrency or len(segments))
        t0 = time.monotonic()
        print(f"Processing {file_name}: {len(segments)} parts of up to {self._segment_length}s")

        async def _one(segment: t.SegmentDescriptor):
            async with sem:
                slots[segment.index - 1] = await self._pipeline.execute(segment, file_bytes, file_name)

        await asyncio.gather(*(_one(s) for s in segments))
        n_ok = sum(1 for o in slots if o is not None and o.ok)
        print(f"Finished {file_name} in {time.monotonic() - t0:.0f}s: {n_ok}/{len(segments)} parts succeeded")
        return slots

    async def run(self, total_duration: int, file_bytes: bytes, file_name: str) -> list[t.TranscriptionResult]:
        outcomes = await self.outcomes(total_duration, file_bytes, file_name)
        failure = next((o for o in outcomes if not o.ok), None)
        if failure is not None:
            raise errors.OrchestratorError(failure)
        return [o.result for o in outcomes]
