from fastapi import FastAPI, File, Form, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from vrecap import batch, errors, pipeline, types as t

SUCCESS_MESSAGE = "Files uploaded, converted, and saved successfully"
FAILURE_MESSAGE = "An error occurred during file conversion."


class PartResult(BaseModel):
    part: int
    time_duration: str
    start_seconds: int
    end_seconds: int
    transcript: str
    title: str
    content: str


class UploadResponse(BaseModel):
    message: str
    transcriptionResults: list[PartResult]


def _to_part(r: t.TranscriptionResult) -> PartResult:
    start, end = r.time_range
    return PartResult(
        part=r.segment_index,
        time_duration=f"{start}:{end}",
        start_seconds=start,
        end_seconds=end,
        transcript=r.raw_transcript,
        title=r.recap_title,
        content=r.recap_body,
    )


def _parse_duration(raw: str | None) -> int | None:
    try:
        value = int((raw or "").strip())
    except ValueError:
        return None
    return value if value > 0 else None


def create_app(orchestrator: batch.Orchestrator | None = None) -> FastAPI:
    app = FastAPI(title="Video Segment Recap")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _orchestrator = orchestrator or batch.Orchestrator(pipeline.create())

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/upload", response_model=UploadResponse)
    async def upload(
        file: UploadFile | None = File(default=None),
        duration: str | None = Form(default=None),
    ):
        video_duration = _parse_duration(duration)
        if video_duration is None:
            return PlainTextResponse("Invalid video duration provided.", status_code=400)
        if file is None or not file.filename:
            print("No file uploaded")
            return PlainTextResponse("No file uploaded.", status_code=400)

        file_bytes = await file.read()
        try:
            results = await _orchestrator.run(video_duration, file_bytes, file.filename)
        except errors.OrchestratorError as exc:
            print(f"Error during file conversion: {exc}")
            return JSONResponse(
                {"error": FAILURE_MESSAGE, "part": exc.segment_index, "kind": exc.kind.value},
                status_code=500,
            )
        return UploadResponse(
            message=SUCCESS_MESSAGE,
            transcriptionResults=[_to_part(r) for r in results],
        )

    return app
