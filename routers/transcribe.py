"""
Transcription router: proxies recorded audio to the transcription API.
"""
import logging
import uuid
from fastapi import APIRouter, Request

from routers.notes import error_response
from services.transcription_service import TranscriptionService, TranscriptionServiceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["transcribe"])

MAX_AUDIO_SIZE = 100 * 1024 * 1024  # 100MB in bytes


@router.post("/transcribe")
async def transcribe_audio(request: Request):
    """
    Transcribe a raw audio body.

    The request body is the audio itself (e.g. audio/webm from MediaRecorder)
    and is forwarded untouched. The transcription API's JSON is returned
    as-is.
    """
    processing_id = str(uuid.uuid4())
    mimetype = request.headers.get("content-type", "application/octet-stream")

    audio_bytes = await request.body()
    file_size = len(audio_bytes)
    logger.info(
        f"Transcription request: processing_id={processing_id}, "
        f"mimetype={mimetype}, size={file_size} bytes"
    )

    if not audio_bytes:
        logger.warning(f"Empty audio body: processing_id={processing_id}")
        return error_response(400, "Missing audio in request body")

    if file_size > MAX_AUDIO_SIZE:
        logger.warning(
            f"Audio too large: processing_id={processing_id}, "
            f"size={file_size}, max={MAX_AUDIO_SIZE}"
        )
        return error_response(
            413,
            "Audio too large",
            f"Maximum size: {MAX_AUDIO_SIZE / (1024 * 1024):.0f}MB"
        )

    try:
        transcription_service = TranscriptionService()
    except ValueError as e:
        logger.error(f"Transcription unavailable: processing_id={processing_id}, error={e}")
        return error_response(503, "Transcription is not configured", str(e))

    try:
        result = await transcription_service.transcribe_audio(audio_bytes, mimetype)
    except TranscriptionServiceError as e:
        logger.error(
            f"Transcription failed: processing_id={processing_id}, error={e}",
            exc_info=True
        )
        return error_response(502, "Failed to transcribe audio", str(e))

    logger.info(f"Transcription complete: processing_id={processing_id}")
    return result
