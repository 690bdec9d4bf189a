"""GeminiInferenceClient — Google Gemini generateContent over plain HTTPS."""
import json
import logging
import time
from typing import Any, Optional

import httpx

from mrestore.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    GEMINI_DEFAULT_API_BASE,
    GEMINI_DEFAULT_MODEL,
    GEMINI_GENERATE_PATH,
    GEMINI_KEY_PARAM,
    GENERATION_CONFIG,
    HTTP_TOO_MANY_REQUESTS,
    MSG_CALLING_GEMINI,
    MSG_ERR_INFERENCE,
    MSG_ERR_NO_API_KEY,
    MSG_ERR_NOT_JSON,
    MSG_ERR_NOT_OBJECT,
    MSG_ERR_RATE_LIMIT,
    MSG_GEMINI_DONE,
    MSG_GEMINI_FAILED,
    MSG_GEMINI_RATE_LIMITED,
    MSG_RAW_RESPONSE,
    SOIL_ANALYSIS_PROMPT,
)
from mrestore.errors import ConfigurationError, InferenceError, RateLimitError
from mrestore.inference.client import InferenceClient

logger = logging.getLogger(__name__)


def build_request_body(image_b64: str, mime_type: str) -> dict[str, Any]:
    return {
        "contents": [
            {
                "parts": [
                    {"text": SOIL_ANALYSIS_PROMPT},
                    {"inline_data": {"mime_type": mime_type, "data": image_b64}},
                ]
            }
        ],
        "generationConfig": dict(GENERATION_CONFIG),
    }


def _redact(exc: httpx.HTTPError) -> str:
    """Exception text with the request URL, key included, swapped for a keyless copy."""
    detail = str(exc)
    try:
        url = exc.request.url
    except RuntimeError:
        return detail
    return detail.replace(str(url), str(url.copy_remove_param(GEMINI_KEY_PARAM)))


class GeminiInferenceClient(InferenceClient):

    def __init__(
        self,
        api_key: Optional[str],
        model: str = GEMINI_DEFAULT_MODEL,
        api_base: str = GEMINI_DEFAULT_API_BASE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._url = api_base.rstrip("/") + GEMINI_GENERATE_PATH.format(model=model)
        self._timeout = timeout
        self._transport = transport

    async def generate(self, image_b64: str, mime_type: str) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError(MSG_ERR_NO_API_KEY)

        logger.info(MSG_CALLING_GEMINI, self._model)
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._url,
                    params={GEMINI_KEY_PARAM: self._api_key},
                    json=build_request_body(image_b64, mime_type),
                )
            payload = self._check(response)
        except RateLimitError:
            logger.warning(MSG_GEMINI_RATE_LIMITED)
            raise
        except httpx.HTTPError as exc:
            detail = _redact(exc)
            logger.error(MSG_GEMINI_FAILED, time.monotonic() - start, detail)
            raise InferenceError(MSG_ERR_INFERENCE % detail) from exc
        except InferenceError as exc:
            logger.error(MSG_GEMINI_FAILED, time.monotonic() - start, exc)
            raise

        logger.info(MSG_GEMINI_DONE, time.monotonic() - start)
        logger.debug(MSG_RAW_RESPONSE, json.dumps(payload, indent=2))
        return payload

    @staticmethod
    def _check(response: httpx.Response) -> dict[str, Any]:
        match response.status_code:
            case code if code == HTTP_TOO_MANY_REQUESTS:
                raise RateLimitError(MSG_ERR_RATE_LIMIT)
            case _:
                response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as exc:
            raise InferenceError(MSG_ERR_INFERENCE % MSG_ERR_NOT_JSON) from exc

        match payload:
            case dict():
                return payload
            case _:
                raise InferenceError(MSG_ERR_INFERENCE % MSG_ERR_NOT_OBJECT)
