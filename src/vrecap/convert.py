"""FreeConvert job workflow for a single segment.

Each run submits an import/convert/export job, uploads the source video to the
import task's form, polls the job until the provider reports a terminal status
and downloads the converted audio next to the other parts.
"""

import asyncio
import os
from pathlib import Path

import httpx

from vrecap import errors, util, types as t

DEFAULT_BASE_URL = "https://api.freeconvert.com/v1"
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_POLLS = 120
DEFAULT_RETRIES = 2
DEFAULT_RETRY_BACKOFF = 1.0

IMPORT_TASK = "import-1"
CONVERT_TASK = "convert-1"
EXPORT_TASK = "export-1"

IN_PROGRESS_STATUSES = ("processing",)


def job_body(
    segment: t.SegmentDescriptor,
    input_format: str = "mp4",
    output_format: str = "mp3",
) -> util.Json:
    return {
        "tasks": {
            IMPORT_TASK: {"operation": "import/upload"},
            CONVERT_TASK: {
                "operation": "convert",
                "input": IMPORT_TASK,
                "input_format": input_format,
                "output_format": output_format,
                "options": {
                    "video_audio_remove": False,
                    "cut_start": util.format_time(segment.start_seconds),
                    "cut_end": util.format_time(segment.end_seconds),
                },
            },
            EXPORT_TASK: {"operation": "export/url", "input": [CONVERT_TASK]},
        }
    }


def task_result(job: util.Json, name: str) -> util.Json:
    """The ``result`` object of a named task, or ``{}`` when it is absent or not an object."""
    result = (util.find_task(job, name) or {}).get("result")
    return result if isinstance(result, dict) else {}


def artifact_path(output_dir: Path, segment: t.SegmentDescriptor, output_format: str = "mp3") -> Path:
    return output_dir / f"converted_part{segment.index}.{output_format}"


class ConversionJobClient:
    def __init__(
        self,
        api_key: str,
        output_dir: Path,
        base_url: str = DEFAULT_BASE_URL,
        client: httpx.AsyncClient | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_polls: int = DEFAULT_MAX_POLLS,
        retries: int = DEFAULT_RETRIES,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        input_format: str = "mp4",
        output_format: str = "mp3",
        timeout: float = 300,
    ):
        self._api_key = api_key
        self._output_dir = output_dir
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._poll_interval = poll_interval
        self._max_polls = max_polls
        self._retries = retries
        self._retry_backoff = retry_backoff
        self._input_format = input_format
        self._output_format = output_format
        self._timeout = timeout

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    async def run(self, segment: t.SegmentDescriptor, file_bytes: bytes, file_name: str) -> Path:
        if self._client is not None:
            return await self._run(self._client, segment, file_bytes, file_name)
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            return await self._run(client, segment, file_bytes, file_name)

    async def _run(
        self, client: httpx.AsyncClient, segment: t.SegmentDescriptor,
        file_bytes: bytes, file_name: str,
    ) -> Path:
        tag = f"[part {segment.index}]"
        job, upload_url, upload_params = await self.submit(client, segment)
        print(f"{tag} Created job {job.id} ({util.format_time(segment.start_seconds)}-{util.format_time(segment.end_seconds)})")
        try:
            job.advance(t.JobStatus.UPLOADING)
            await self.upload(client, upload_url, upload_params, file_bytes, file_name)
            job.advance(t.JobStatus.PROCESSING)
            print(f"{tag} Uploaded {file_name}, polling job {job.id}...")
            await self.poll(client, job)
        except errors.ConversionError:
            if not job.terminal:
                job.advance(t.JobStatus.FAILED)
            raise
        path = artifact_path(self._output_dir, segment, self._output_format)
        await self.download(client, job.download_url, path)
        print(f"{tag} Saved {path}")
        return path

    async def submit(self, client: httpx.AsyncClient, segment: t.SegmentDescriptor) -> tuple[t.ConversionJob, str, dict]:
        body = job_body(segment, self._input_format, self._output_format)
        try:
            resp = await client.post(f"{self._base_url}/process/jobs", json=body, headers=self._headers)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise errors.ProviderError(f"Job creation failed: {exc}") from exc

        job_id = data.get("id") if isinstance(data, dict) else None
        form = task_result(data, IMPORT_TASK).get("form")
        if not isinstance(form, dict):
            form = {}
        upload_url = form.get("url")
        if not job_id or not isinstance(upload_url, str) or not upload_url:
            raise errors.ProviderError(f"Missing {IMPORT_TASK} upload form in job response: {data!r}")
        params = form.get("parameters") or {}
        if not isinstance(params, dict):
            raise errors.ProviderError(f"Upload parameters for job {job_id} are not an object: {params!r}")
        return t.ConversionJob(id=str(job_id)), upload_url, params

    async def upload(
        self, client: httpx.AsyncClient, url: str, params: dict,
        file_bytes: bytes, file_name: str,
    ):
        data = {k: str(v) for k, v in params.items()}
        files = {"file": (file_name, file_bytes)}
        try:
            resp = await self._with_retries(lambda: client.post(url, data=data, files=files))
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise errors.UploadError(f"Upload to {url} failed: {exc}") from exc

    async def poll(self, client: httpx.AsyncClient, job: t.ConversionJob) -> t.ConversionJob:
        url = f"{self._base_url}/process/jobs/{job.id}"
        for _ in range(self._max_polls):
            await asyncio.sleep(self._poll_interval)
            try:
                resp = await self._with_retries(lambda: client.get(url, headers=self._headers))
                resp.raise_for_status()
                data = resp.json()
            except (httpx.HTTPError, ValueError) as exc:
                raise errors.ProviderError(f"Status check for job {job.id} failed: {exc}") from exc

            status = data.get("status") if isinstance(data, dict) else None
            if not status:
                raise errors.ProviderError(f"Status response for job {job.id} has no status: {data!r}")
            if status in IN_PROGRESS_STATUSES:
                job.advance(t.JobStatus.PROCESSING)
                continue
            if status == t.JobStatus.COMPLETED.value:
                download_url = task_result(data, EXPORT_TASK).get("url")
                if not isinstance(download_url, str) or not download_url:
                    raise errors.ProviderError(
                        f"Missing {EXPORT_TASK} download URL for completed job {job.id}: {download_url!r}"
                    )
                job.advance(t.JobStatus.COMPLETED, download_url)
                return job
            job.advance(t.JobStatus.FAILED)
            raise errors.ConversionFailed(job.id, status)
        raise errors.PollTimeout(f"Job {job.id} still processing after {self._max_polls} polls")

    async def download(self, client: httpx.AsyncClient, url: str, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".part")
        try:
            async with client.stream("GET", url) as r:
                r.raise_for_status()
                with open(tmp, "wb") as f:
                    async for chunk in r.aiter_bytes(chunk_size=65536):
                        f.write(chunk)
            os.replace(tmp, path)
        except (httpx.HTTPError, OSError) as exc:
            tmp.unlink(missing_ok=True)
            raise errors.DownloadError(f"Download of {url} to {path} failed: {exc}") from exc
        return path

    async def _with_retries(self, send):
        for attempt in range(self._retries + 1):
            try:
                return await send()
            except httpx.TransportError:
                if attempt == self._retries:
                    raise
                await asyncio.sleep(self._retry_backoff * 2 ** attempt)
