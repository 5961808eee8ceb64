import logging

from llm.llm_client import LLMClient
from llm.providers.base import ProviderError
from taskgrove.errors import ExtractionFailed
from taskgrove.models import RawMedia

logger = logging.getLogger(__name__)


class TextExtractor:
    """Turns a photo or voice memo into plain text via the LLM provider."""

    def __init__(self, llm_client: LLMClient = None):
        self.llm_client = llm_client or LLMClient()

    def extract(self, media: RawMedia) -> str:
        kind = media.kind
        if kind is None:
            raise ExtractionFailed(f"Unsupported media type: {media.mime_type}")
        if not media.data:
            raise ExtractionFailed(f"The uploaded {kind} is empty")

        logger.info(f"Recognizing text from {kind} ({len(media.data)} bytes)")
        try:
            text = self.llm_client.recognize_text(media.data, media.mime_type)
        except ProviderError as e:
            logger.error(f"Text recognition failed: {e}")
            raise ExtractionFailed(f"Failed to read the {kind}") from e

        text = (text or "").strip()
        if not text:
            raise ExtractionFailed(f"No text could be extracted from the {kind}")
        return text
