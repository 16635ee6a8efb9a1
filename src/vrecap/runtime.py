import os
import sys
from pathlib import Path

CACHE_DIR = Path(os.environ.get("VRECAP_CACHE_DIR", Path.home() / ".cache" / "vrecap"))
OUTPUT_DIR = Path(os.environ.get("VRECAP_OUTPUT_DIR", "converted"))
FREECONVERT_URL = os.environ.get("VRECAP_FREECONVERT_URL", "https://api.freeconvert.com/v1")
POLL_INTERVAL = float(os.environ.get("VRECAP_POLL_INTERVAL", "5"))
MAX_POLLS = int(os.environ.get("VRECAP_MAX_POLLS", "120"))
RETRIES = int(os.environ.get("VRECAP_RETRIES", "2"))
TRANSCRIBER = os.environ.get("VRECAP_TRANSCRIBER", "assemblyai")
RECAP_MODEL = os.environ.get("VRECAP_RECAP_MODEL", "claude-sonnet-4-5-20250929")
WHISPER_MODEL = "large-v3"


def cache_dir() -> Path:
    CACHE_DIR.mkdir(parents=True, exist_ok=True)
    return CACHE_DIR


def whisper_cache() -> Path:
    d = cache_dir() / "whisper"
    d.mkdir(parents=True, exist_ok=True)
    return d


def freeconvert_key() -> str | None:
    return os.environ.get("FREECONVERT_API_KEY")


def _check_key(name: str) -> bool:
    return bool(os.environ.get(name))


def check(
    needs_freeconvert: bool = False, needs_assemblyai: bool = False,
    needs_anthropic: bool = False,
) -> list[str]:
    errors = []

    if needs_freeconvert and not _check_key("FREECONVERT_API_KEY"):
        errors.append("FREECONVERT_API_KEY not set — add it to .env or export it")

    if needs_assemblyai and not _check_key("ASSEMBLYAI_API_KEY"):
        errors.append("ASSEMBLYAI_API_KEY not set — add it to .env or export it")

    if needs_anthropic and not _check_key("ANTHROPIC_API_KEY"):
        errors.append("ANTHROPIC_API_KEY not set — add it to .env or export it")

    return errors


def require(
    needs_freeconvert: bool = False, needs_assemblyai: bool = False,
    needs_anthropic: bool = False,
):
    errors = check(
        needs_freeconvert=needs_freeconvert, needs_assemblyai=needs_assemblyai,
        needs_anthropic=needs_anthropic,
    )
    if errors:
        print("Missing requirements:", file=sys.stderr)
        for e in errors:
            print(f"  - {e}", file=sys.stderr)
        sys.exit(1)


def require_pipeline():
    require(
        needs_freeconvert=True,
        needs_assemblyai=TRANSCRIBER.lower() == "assemblyai",
        needs_anthropic=True,
    )


def ensure_whisper():
    from faster_whisper import WhisperModel
    d = whisper_cache()
    print(f"Loading Whisper {WHISPER_MODEL} (cache: {d})")
    return WhisperModel(WHISPER_MODEL, device="auto", compute_type="auto", download_root=str(d))
