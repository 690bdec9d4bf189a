"""SoilAnalyzer — image in, NormalizedAnalysis out. Transport-agnostic."""
import base64
import logging
from typing import Optional

from mrestore.constants import DEFAULT_IMAGE_MIME_TYPE, MSG_ANALYSIS_DONE, MSG_RECEIVED_IMAGE
from mrestore.inference.client import InferenceClient
from mrestore.normalizer import normalize_response
from mrestore.schemas import AnalysisRequest, NormalizedAnalysis

logger = logging.getLogger(__name__)


def encode_image(image: bytes) -> str:
    return base64.standard_b64encode(image).decode()


class SoilAnalyzer:
    """Holds only the injected client, so one instance can serve concurrent requests."""

    def __init__(self, client: InferenceClient) -> None:
        self._client = client

    async def analyze(
        self,
        image: bytes,
        user_id: str,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        mime_type: str = DEFAULT_IMAGE_MIME_TYPE,
    ) -> NormalizedAnalysis:
        """Run one analysis. Inference errors propagate; normalization never fails."""
        request = AnalysisRequest(image=image, user_id=user_id, lat=lat, lon=lon, mime_type=mime_type)
        return await self.analyze_request(request)

    async def analyze_request(self, request: AnalysisRequest) -> NormalizedAnalysis:
        logger.info(MSG_RECEIVED_IMAGE, request.user_id, len(request.image), request.lat, request.lon)
        payload = await self._client.generate(encode_image(request.image), request.mime_type)
        result = normalize_response(payload)
        logger.info(MSG_ANALYSIS_DONE, request.user_id)
        return result
