"""TranscriptionService for proxying recorded audio to Deepgram."""
import os
import logging
from typing import Optional

from deepgram import DeepgramClient, PrerecordedOptions

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "nova-2"


class TranscriptionServiceError(Exception):
    """Raised when the transcription API call fails."""
    pass


class TranscriptionService:
    """Service for transcribing audio with Deepgram's prerecorded API."""

    def __init__(self):
        """Initialize with Deepgram API key from environment."""
        api_key = os.getenv("DEEPGRAM_API_KEY")
        if not api_key:
            raise ValueError("DEEPGRAM_API_KEY environment variable is required")

        self.client = DeepgramClient(api_key)
        self.model = os.getenv("DEEPGRAM_MODEL", DEFAULT_MODEL)
        logger.info(f"TranscriptionService initialized with model={self.model}")

    async def transcribe_audio(self, audio_bytes: bytes, mimetype: Optional[str] = None) -> dict:
        """
        Transcribe an audio buffer and return Deepgram's response verbatim.

        Args:
            audio_bytes: Raw audio bytes exactly as the browser sent them
            mimetype: Content type reported by the browser (logged only;
                Deepgram detects the container itself)

        Returns:
            Deepgram response as a dictionary

        Raises:
            TranscriptionServiceError: If the Deepgram API call fails
        """
        logger.info(
            f"Starting Deepgram transcription, mimetype={mimetype}, "
            f"size={len(audio_bytes)} bytes"
        )

        options = PrerecordedOptions(
            model=self.model,
            smart_format=True,
            punctuate=True,
        )

        try:
            response = await self.client.listen.asyncrest.v("1").transcribe_file(
                {"buffer": audio_bytes},
                options,
            )
        except Exception as e:
            logger.error(f"Deepgram transcription failed: {e}", exc_info=True)
            raise TranscriptionServiceError(f"Transcription failed: {e}") from e

        result = response.to_dict() if hasattr(response, "to_dict") else dict(response)
        logger.info(f"Deepgram transcription complete: keys={sorted(result.keys())}")
        return result
