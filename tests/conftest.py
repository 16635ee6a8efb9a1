import json
import pathlib

import dotenv
import httpx
import pytest

from vrecap import convert, errors, types as t

dotenv.load_dotenv(pathlib.Path(__file__).parent.parent / ".env")

API_URL = "https://api.freeconvert.test/v1"
UPLOAD_HOST = "upload.freeconvert.test"
FILES_HOST = "files.freeconvert.test"


class FakeFreeConvert:
    """In-memory FreeConvert job API, served through httpx.MockTransport.

    Job ids encode the part they were created for, so per-part behavior can be
    scripted through ``final_status``.
    """

    def __init__(self):
        self.processing_polls = 1
        self.final_status: dict[int, str] = {}
        self.omit_import_result = False
        self.upload_parameters = None
        self.export_url = None
        self.omit_export_result = False
        self.upload_status = 200
        self.upload_transport_failures = 0
        self.download_status = 200
        self.jobs: dict[str, dict] = {}
        self.uploads: list[bytes] = []
        self.auth_headers: list[str] = []

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def converter(self, client: httpx.AsyncClient, output_dir: pathlib.Path, **kwargs) -> convert.ConversionJobClient:
        kwargs.setdefault("poll_interval", 0)
        kwargs.setdefault("retry_backoff", 0)
        return convert.ConversionJobClient(
            api_key="test-key", output_dir=output_dir, base_url=API_URL, client=client, **kwargs,
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        host, path = request.url.host, request.url.path
        if host == UPLOAD_HOST:
            return self._upload(request)
        if host == FILES_HOST:
            if self.download_status != 200:
                return httpx.Response(self.download_status)
            return httpx.Response(200, content=b"ID3" + path.encode())
        self.auth_headers.append(request.headers.get("authorization", ""))
        if request.method == "POST" and path == "/v1/process/jobs":
            return self._create(json.loads(request.content))
        if request.method == "GET" and path.startswith("/v1/process/jobs/"):
            return self._status(path.rsplit("/", 1)[-1])
        return httpx.Response(404)

    def _create(self, body: dict) -> httpx.Response:
        cut_start = body["tasks"]["convert-1"]["options"]["cut_start"]
        h, m, s = (int(x) for x in cut_start.split(":"))
        part = (h * 3600 + m * 60 + s) // 30 + 1
        job_id = f"job-{part}"
        self.jobs[job_id] = {"part": part, "polls": 0, "body": body}
        import_task = {"name": "import-1", "operation": "import/upload"}
        if not self.omit_import_result:
            import_task["result"] = {"form": {
                "url": f"https://{UPLOAD_HOST}/{job_id}",
                "parameters": (
                    self.upload_parameters if self.upload_parameters is not None
                    else {"signature": f"sig-{job_id}", "expires": 1700000000}
                ),
            }}
        return httpx.Response(200, json={
            "id": job_id,
            "status": "created",
            "tasks": [import_task, {"name": "convert-1"}, {"name": "export-1"}],
        })

    def _upload(self, request: httpx.Request) -> httpx.Response:
        if self.upload_transport_failures > 0:
            self.upload_transport_failures -= 1
            raise httpx.ConnectError("connection reset", request=request)
        self.uploads.append(request.content)
        return httpx.Response(self.upload_status)

    def _status(self, job_id: str) -> httpx.Response:
        job = self.jobs[job_id]
        job["polls"] += 1
        if job["polls"] <= self.processing_polls:
            return httpx.Response(200, json={"id": job_id, "status": "processing", "tasks": []})
        status = self.final_status.get(job["part"], "completed")
        tasks = [{"name": "import-1"}, {"name": "convert-1"}, {"name": "export-1"}]
        if status == "completed" and not self.omit_export_result:
            url = self.export_url if self.export_url is not None else f"https://{FILES_HOST}/{job_id}.mp3"
            tasks[2]["result"] = {"url": url}
        return httpx.Response(200, json={"id": job_id, "status": status, "tasks": tasks})


class FakeTranscriber:
    def __init__(self, fail_on: tuple[str, ...] = ()):
        self.fail_on = fail_on
        self.calls = []

    def transcribe(self, audio_path):
        self.calls.append(audio_path)
        if audio_path.name in self.fail_on:
            raise errors.TranscriptionError(f"no speech in {audio_path.name}")
        return f"spoken words from {audio_path.name}"


class FakeRecapper:
    def recap(self, transcript: str) -> t.Recap:
        return t.Recap(title=f"Recap of {transcript.rsplit(' ', 1)[-1]}", body="Scene one. Scene two.")


@pytest.fixture
def freeconvert():
    return FakeFreeConvert()


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "converted"
