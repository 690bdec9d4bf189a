"""Schema tests: provider payload accessors and lenient ParsedAnalysis coercion"""
import pytest

from mrestore.schemas import (
    DetectedObject,
    NormalizedAnalysis,
    ParsedAnalysis,
    ProviderResponse,
    SoilAnalysis,
)


# ── ProviderResponse ──────────────────────────────────────────────────────────


def test_first_text_returns_first_part_text():
    response = ProviderResponse.model_validate(
        {"candidates": [{"content": {"parts": [{"text": "first"}, {"text": "second"}]}}]}
    )

    assert response.first_text() == "first"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": {}}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"inline_data": {}}]}}]},
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
    ],
)
def test_first_text_is_none_when_absent(payload):
    assert ProviderResponse.model_validate(payload).first_text() is None


def test_unknown_provider_fields_are_ignored():
    response = ProviderResponse.model_validate(
        {
            "candidates": [
                {
                    "content": {"parts": [{"text": "ok"}], "role": "model"},
                    "finishReason": "STOP",
                }
            ],
            "usageMetadata": {"totalTokenCount": 10},
        }
    )

    assert response.first_text() == "ok"


def test_malformed_sibling_candidates_and_parts_become_none():
    response = ProviderResponse.model_validate(
        {
            "candidates": [
                {"content": {"parts": [{"text": "first"}, {"text": ["bad"]}, "junk"]}},
                {"content": "garbage"},
                17,
            ]
        }
    )

    assert response.first_text() == "first"
    assert response.candidates[1].content is None
    assert response.candidates[2] is None
    assert response.candidates[0].content.parts[1].text is None
    assert response.candidates[0].content.parts[2] is None


def test_non_list_candidates_validate_to_empty():
    assert ProviderResponse.model_validate({"candidates": "nope"}).candidates == []


# ── ParsedAnalysis ────────────────────────────────────────────────────────────


def test_single_string_recommendation_becomes_list():
    parsed = ParsedAnalysis.model_validate({"recommendations": "Add mulch"})

    assert parsed.recommendations == ["Add mulch"]


def test_empty_lists_become_absent():
    parsed = ParsedAnalysis.model_validate({"recommendations": [], "suggested_crops": ""})

    assert parsed.recommendations is None
    assert parsed.suggested_crops is None


def test_detected_objects_accept_strings_and_aliases():
    parsed = ParsedAnalysis.model_validate(
        {
            "detected_objects": [
                "rocks",
                {"name": "water", "confidence": "0.7"},
                {"label": "grass", "confidence": "high"},
                {"unrelated": True},
            ]
        }
    )

    assert [(o.label, o.confidence) for o in parsed.detected_objects] == [
        ("rocks", None),
        ("water", 0.7),
        ("grass", None),
    ]


def test_non_string_soil_condition_is_stringified():
    parsed = ParsedAnalysis.model_validate({"soil_condition": {"health": "good"}})

    assert parsed.soil_condition == "{'health': 'good'}"


def test_all_fields_optional():
    parsed = ParsedAnalysis.model_validate({})

    assert parsed.soil_condition is None
    assert parsed.detected_objects == []
    assert parsed.recommendations is None
    assert parsed.suggested_crops is None


# ── NormalizedAnalysis ────────────────────────────────────────────────────────


def test_to_dict_omits_absent_optional_fields():
    analysis = NormalizedAnalysis(
        timestamp="2026-01-01T00:00:00+00:00",
        detected_objects=(DetectedObject("Vegetation", 0.8),),
        soil_analysis=SoilAnalysis("loamy", "loamy", ("Add mulch",), ("Corn",)),
        raw_response={"candidates": []},
        raw_text="text",
    )

    data = analysis.to_dict()

    assert data["provider"] == "google-gemini"
    assert data["detected_objects"] == [{"label": "Vegetation", "confidence": 0.8}]
    assert data["soil_analysis"]["recommendations"] == ["Add mulch"]
    assert "error" not in data
    assert "soil_type" not in data
