import os
from typing import Protocol, runtime_checkable

from vrecap import errors, runtime, types as t

PROMPT = """Write a recap of this transcript of one part of a video. Write it in detail, giving a scene by scene explanation of this part.
Start with a single line holding a short title for the part, then the recap.

Transcript: {transcript}"""

TITLE_PREFIX = "Title: "


@runtime_checkable
class Recapper(Protocol):
    def recap(self, transcript: str) -> t.Recap: ...


def parse_recap(text: str) -> t.Recap:
    """Split a generated recap into its title line and a single-line body.

    The first line is the title, with a leading ``Title: `` marker removed.
    Remaining non-empty lines are joined with single spaces.
    """
    lines = (text or "").strip().splitlines()
    if not lines:
        raise errors.MalformedResponse("Recap response was empty")
    title = lines[0].strip()
    if title.startswith(TITLE_PREFIX):
        title = title[len(TITLE_PREFIX):]
    body = " ".join(line.strip() for line in lines[1:] if line.strip())
    return t.Recap(title=title.strip(), body=body)


class ClaudeRecapper:
    def __init__(self, client=None, model: str | None = None, max_tokens: int = 2048):
        if client is None:
            import anthropic
            client = anthropic.Anthropic(api_key=os.environ["ANTHROPIC_API_KEY"])
        self._client = client
        self._model = model or runtime.RECAP_MODEL
        self._max_tokens = max_tokens

    def recap(self, transcript: str) -> t.Recap:
        try:
            resp = self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": PROMPT.format(transcript=transcript)}],
            )
            text = "".join(block.text for block in resp.content if getattr(block, "type", "text") == "text")
        except Exception as exc:
            raise errors.RecapError(f"Recap request failed: {exc}") from exc
        return parse_recap(text)
