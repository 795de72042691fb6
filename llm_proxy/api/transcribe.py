import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import PlainTextResponse

from llm_proxy.core.config import Settings
from llm_proxy.core.dependencies import enforce_quota, get_settings
from llm_proxy.core.exceptions import TranscriptionError
from llm_proxy.gateway.transcription import TranscriptionAdapter, staged_upload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transcribe"])


@router.post("/transcribe", response_class=PlainTextResponse, dependencies=[Depends(enforce_quota)])
async def transcribe(
    file: UploadFile | None = File(None),
    settings: Settings = Depends(get_settings),
):
    # Upload and transcription failures are reported as plain text
    if file is None:
        return PlainTextResponse("No file uploaded", status_code=400)

    adapter = TranscriptionAdapter(
        api_key=settings.require("openai_api_key"),
        model=settings.transcription_model,
        timeout=settings.upstream_timeout,
    )

    data = await file.read()
    try:
        with staged_upload(data, file.filename, file.content_type, settings.upload_dir) as job:
            text = await adapter.transcribe(job)
    except TranscriptionError as e:
        return PlainTextResponse(e.message, status_code=e.status_code)

    logger.info("Transcribed %s (%d bytes)", job.filename, len(data))
    return PlainTextResponse(text)
