from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    PROVIDER_ERROR = "provider_error"
    UPLOAD_ERROR = "upload_error"
    CONVERSION_FAILED = "conversion_failed"
    POLL_TIMEOUT = "poll_timeout"
    DOWNLOAD_ERROR = "download_error"
    TRANSCRIPTION_ERROR = "transcription_error"
    RECAP_ERROR = "recap_error"
    MALFORMED_RESPONSE = "malformed_response"


class PipelineError(Exception):
    """Base for every failure a segment pipeline can report."""
    kind: ErrorKind


class InvalidInput(PipelineError, ValueError):
    kind = ErrorKind.INVALID_INPUT


class ConversionError(PipelineError):
    pass


class ProviderError(ConversionError):
    kind = ErrorKind.PROVIDER_ERROR


class UploadError(ConversionError):
    kind = ErrorKind.UPLOAD_ERROR


class ConversionFailed(ConversionError):
    kind = ErrorKind.CONVERSION_FAILED

    def __init__(self, job_id: str, status: str):
        self.job_id = job_id
        self.status = status
        super().__init__(f"Conversion job {job_id} ended with status {status!r}")


class PollTimeout(ConversionError):
    kind = ErrorKind.POLL_TIMEOUT


class DownloadError(ConversionError):
    kind = ErrorKind.DOWNLOAD_ERROR


class TranscriptionError(PipelineError):
    kind = ErrorKind.TRANSCRIPTION_ERROR


class RecapError(PipelineError):
    kind = ErrorKind.RECAP_ERROR


class MalformedResponse(RecapError):
    kind = ErrorKind.MALFORMED_RESPONSE


class OrchestratorError(PipelineError):
    """Raised when any segment fails; carries the lowest-index failure."""

    def __init__(self, failure):
        self.failure = failure
        self.kind = failure.kind
        self.segment_index = failure.segment_index
        super().__init__(f"Segment {failure.segment_index} failed ({failure.kind.value}): {failure.message}")
