from dataclasses import dataclass
from enum import Enum

from vrecap.errors import ErrorKind


@dataclass(frozen=True)
class SegmentDescriptor:
    index: int
    start_seconds: int
    end_seconds: int

    @property
    def duration_seconds(self) -> int:
        return self.end_seconds - self.start_seconds


class JobStatus(str, Enum):
    CREATED = "created"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS = {
    JobStatus.CREATED: {JobStatus.UPLOADING, JobStatus.FAILED},
    JobStatus.UPLOADING: {JobStatus.PROCESSING, JobStatus.FAILED},
    JobStatus.PROCESSING: {JobStatus.PROCESSING, JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


@dataclass
class ConversionJob:
    id: str
    status: JobStatus = JobStatus.CREATED
    download_url: str | None = None

    @property
    def terminal(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)

    def advance(self, status: JobStatus, download_url: str | None = None):
        if status not in _TRANSITIONS[self.status]:
            raise RuntimeError(f"Job {self.id}: illegal transition {self.status.value} -> {status.value}")
        if status == JobStatus.COMPLETED and not download_url:
            raise RuntimeError(f"Job {self.id}: completed without a download url")
        self.status = status
        self.download_url = download_url if status == JobStatus.COMPLETED else None


@dataclass(frozen=True)
class Recap:
    title: str
    body: str


@dataclass(frozen=True)
class TranscriptionResult:
    segment_index: int
    time_range: tuple[int, int]
    raw_transcript: str
    recap_title: str
    recap_body: str


@dataclass(frozen=True)
class Success:
    result: TranscriptionResult
    ok = True

    @property
    def segment_index(self) -> int:
        return self.result.segment_index


@dataclass(frozen=True)
class Failure:
    segment_index: int
    kind: ErrorKind
    message: str
    ok = False


Outcome = Success | Failure
