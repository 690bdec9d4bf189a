"""SoilAnalyzer tests — the inference client is mocked, the normalizer is real"""
import asyncio
import base64

import pytest
from unittest.mock import AsyncMock

from mrestore.analyzer import SoilAnalyzer, encode_image
from mrestore.errors import ConfigurationError, InferenceError, RateLimitError
from mrestore.inference.client import InferenceClient
from mrestore.schemas import AnalysisRequest


def gemini_payload(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_analyzer(**generate_kwargs) -> tuple[SoilAnalyzer, AsyncMock]:
    client = AsyncMock(spec=InferenceClient)
    client.generate = AsyncMock(**generate_kwargs)
    return SoilAnalyzer(client), client


def test_encode_image_is_standard_base64():
    assert encode_image(b"\xff\xd8\xff") == base64.standard_b64encode(b"\xff\xd8\xff").decode()


async def test_analyze_sends_encoded_image_and_mime_type():
    analyzer, client = make_analyzer(return_value=gemini_payload('{"soil_condition": "loamy"}'))

    await analyzer.analyze(b"jpeg-bytes", "user-1", mime_type="image/png")

    client.generate.assert_awaited_once_with(encode_image(b"jpeg-bytes"), "image/png")


async def test_analyze_returns_normalized_analysis():
    text = '{"soil_condition":"loamy","recommendations":["Add mulch"],"suggested_crops":["Corn"]}'
    analyzer, _ = make_analyzer(return_value=gemini_payload(text))

    result = await analyzer.analyze(b"img", "user-1", lat=12.5, lon=-3.25)

    assert result.soil_analysis.issue == "loamy"
    assert result.soil_analysis.recommendations == ("Add mulch",)
    assert result.soil_analysis.suggested_crops == ("Corn",)
    assert result.detected_objects == ()


async def test_analyze_defaults_to_jpeg():
    analyzer, client = make_analyzer(return_value=gemini_payload("sandy"))

    await analyzer.analyze(b"img", "user-1")

    assert client.generate.await_args.args[1] == "image/jpeg"


async def test_analyze_request_accepts_request_record():
    analyzer, _ = make_analyzer(return_value=gemini_payload("clay and plants"))

    result = await analyzer.analyze_request(AnalysisRequest(image=b"img", user_id="user-2"))

    assert result.soil_analysis.issue == "Clay soil detected"


async def test_empty_provider_payload_yields_hard_default():
    analyzer, _ = make_analyzer(return_value={"candidates": []})

    result = await analyzer.analyze(b"img", "user-1")

    assert result.error
    assert result.soil_analysis.recommendations
    assert result.soil_analysis.suggested_crops


@pytest.mark.parametrize(
    "error",
    [
        ConfigurationError("Google Gemini API key not configured"),
        RateLimitError("AI service rate limit exceeded. Please try again later."),
        InferenceError("AI analysis failed: timed out"),
    ],
)
async def test_inference_errors_propagate(error):
    analyzer, _ = make_analyzer(side_effect=error)

    with pytest.raises(type(error)):
        await analyzer.analyze(b"img", "user-1")


async def test_concurrent_analyses_are_independent():
    async def generate(image_b64: str, mime_type: str) -> dict:
        text = base64.standard_b64decode(image_b64).decode()
        await asyncio.sleep(0)
        return gemini_payload(text)

    analyzer, _ = make_analyzer(side_effect=generate)

    clay, sandy = await asyncio.gather(
        analyzer.analyze(b"clay ground", "user-a"),
        analyzer.analyze(b"sandy ground", "user-b"),
    )

    assert clay.soil_analysis.issue == "Clay soil detected"
    assert sandy.soil_analysis.issue == "Sandy soil detected"


def test_request_is_immutable():
    request = AnalysisRequest(image=b"img", user_id="user-1")

    with pytest.raises(Exception):
        request.user_id = "other"
