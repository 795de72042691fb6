"""Speech-to-text adapter (OpenAI audio transcriptions).

An upload is staged to a temporary file for the duration of one request,
posted as multipart form data, and removed afterwards on every exit path.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager

import httpx

from llm_proxy.core.exceptions import TranscriptionError
from llm_proxy.gateway.types import DEFAULT_AUDIO_TYPE, TranscriptionJob

logger = logging.getLogger(__name__)


@contextmanager
def staged_upload(
    data: bytes,
    filename: str,
    content_type: str | None = None,
    directory: str | None = None,
) -> Iterator[TranscriptionJob]:
    """Write an uploaded payload to a temp file and delete it on exit."""
    fd, path = tempfile.mkstemp(prefix="upload-", dir=directory or None)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        yield TranscriptionJob(
            path=path,
            filename=filename or os.path.basename(path),
            content_type=content_type or DEFAULT_AUDIO_TYPE,
        )
    finally:
        os.unlink(path)


def _json_object(resp: httpx.Response) -> dict:
    """Decoded response body, or an empty dict when it is not a JSON object."""
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _upstream_message(resp: httpx.Response) -> str:
    error = _json_object(resp).get("error")
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return f"HTTP {resp.status_code}"


class TranscriptionAdapter:
    """OpenAI Whisper transcription client."""

    api_url = "https://api.openai.com/v1/audio/transcriptions"

    def __init__(self, api_key: str, model: str = "whisper-1", timeout: float = 60.0):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    async def transcribe(self, job: TranscriptionJob) -> str:
        """Send the staged file and return the plain transcript text.

        Raises TranscriptionError with the upstream error message when the
        provider supplies one, otherwise with the local error text.
        """
        try:
            with open(job.path, "rb") as fh:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(
                        self.api_url,
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        files={"file": (job.filename, fh, job.content_type)},
                        data={"model": self.model},
                    )
        except (httpx.HTTPError, OSError) as e:
            logger.error("Transcription error: %s", e)
            raise TranscriptionError(str(e)) from e

        if not resp.is_success:
            message = _upstream_message(resp)
            logger.error("Transcription error: %d %s", resp.status_code, message)
            raise TranscriptionError(message)

        text = _json_object(resp).get("text")
        if not isinstance(text, str):
            logger.error("Transcription error: no transcript in %d response", resp.status_code)
            raise TranscriptionError("Malformed transcription response")
        return text
