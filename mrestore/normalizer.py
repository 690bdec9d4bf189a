"""Response normalizer — turns whatever Gemini said into a complete NormalizedAnalysis.

Three tiers, tried in order:

1. strict: decode the JSON object embedded in the generated text;
2. heuristic: keyword rules over the lowercased text;
3. hard default: a fixed, always-valid record, used when anything above fails.

``normalize_response`` never raises.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import reduce
from typing import Any, Optional

from pydantic import ValidationError

from mrestore.constants import (
    CLAY_CONDITION,
    CLAY_CROPS,
    CLAY_RECOMMENDATION,
    DEFAULT_CROPS,
    DEFAULT_ISSUE,
    DEFAULT_RECOMMENDATIONS,
    EXPLANATION_ELLIPSIS,
    EXPLANATION_PREVIEW_CHARS,
    FALLBACK_CROPS,
    FALLBACK_EXPLANATION,
    FALLBACK_ISSUE,
    FALLBACK_RECOMMENDATIONS,
    MSG_ERR_NO_JSON,
    MSG_ERR_NO_TEXT,
    MSG_GENERATED_TEXT,
    MSG_NORMALIZE_FAILED,
    MSG_STRICT_FAILED,
    NO_RESPONSE_TEXT,
    ROCK_RECOMMENDATION,
    SANDY_CONDITION,
    SANDY_CROPS,
    SANDY_RECOMMENDATION,
    VEGETATION_CONFIDENCE,
    VEGETATION_CROPS,
    VEGETATION_LABEL,
)
from mrestore.schemas import (
    DetectedObject,
    NormalizedAnalysis,
    ParsedAnalysis,
    ProviderResponse,
    SoilAnalysis,
)

logger = logging.getLogger(__name__)


class ExtractionError(ValueError):
    """Strict extraction found no usable JSON object. Triggers the heuristic tier."""


# ── strict extraction ─────────────────────────────────────────────────────────


def _decode_object(text: str, start: int) -> Optional[dict]:
    try:
        value, _ = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def extract_json_object(text: str) -> ParsedAnalysis:
    """Decode the JSON object that starts at the first ``{`` in ``text``.

    Trailing prose is ignored, braces included, so any text a greedy first-``{``
    to last-``}`` match would decode also decodes here. Raises ExtractionError
    when there is no object or it does not validate.
    """
    start = text.find("{")
    decoded = _decode_object(text, start) if start != -1 else None
    match decoded:
        case None:
            raise ExtractionError(MSG_ERR_NO_JSON)
        case _:
            try:
                return ParsedAnalysis.model_validate(decoded)
            except ValidationError as e:
                raise ExtractionError(str(e)) from e


# ── heuristic extraction ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class KeywordRule:
    keywords: tuple[str, ...]
    soil_condition: Optional[str] = None
    recommendations: tuple[str, ...] = ()
    crops: tuple[str, ...] = ()
    detected: tuple[DetectedObject, ...] = ()

    def matches(self, lowered: str) -> bool:
        return any(k in lowered for k in self.keywords)


@dataclass(frozen=True)
class _Findings:
    soil_condition: str = DEFAULT_ISSUE
    recommendations: tuple[str, ...] = ()
    crops: tuple[str, ...] = ()
    detected: tuple[DetectedObject, ...] = ()

    def apply(self, rule: KeywordRule) -> "_Findings":
        return _Findings(
            soil_condition=rule.soil_condition or self.soil_condition,
            recommendations=self.recommendations + rule.recommendations,
            crops=self.crops + rule.crops,
            detected=self.detected + rule.detected,
        )


# Order matters: a later rule's soil_condition overwrites an earlier one.
KEYWORD_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        keywords=("clay",),
        soil_condition=CLAY_CONDITION,
        recommendations=(CLAY_RECOMMENDATION,),
        crops=CLAY_CROPS,
    ),
    KeywordRule(
        keywords=("sandy", "sand"),
        soil_condition=SANDY_CONDITION,
        recommendations=(SANDY_RECOMMENDATION,),
        crops=SANDY_CROPS,
    ),
    KeywordRule(
        keywords=("rock", "stone"),
        recommendations=(ROCK_RECOMMENDATION,),
    ),
    KeywordRule(
        keywords=("plant", "vegetation"),
        crops=VEGETATION_CROPS,
        detected=(DetectedObject(label=VEGETATION_LABEL, confidence=VEGETATION_CONFIDENCE),),
    ),
)


def parse_text_response(text: str, rules: tuple[KeywordRule, ...] = KEYWORD_RULES) -> ParsedAnalysis:
    lowered = text.lower()
    findings = reduce(
        lambda acc, rule: acc.apply(rule),
        filter(lambda rule: rule.matches(lowered), rules),
        _Findings(),
    )
    return ParsedAnalysis(
        soil_condition=findings.soil_condition,
        detected_objects=[
            {"label": obj.label, "confidence": obj.confidence} for obj in findings.detected
        ],
        recommendations=list(findings.recommendations),
        suggested_crops=list(findings.crops),
    )


def parse_generated_text(text: str) -> ParsedAnalysis:
    try:
        return extract_json_object(text)
    except ExtractionError as e:
        logger.debug(MSG_STRICT_FAILED, e)
        return parse_text_response(text)


# ── assembly ──────────────────────────────────────────────────────────────────


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _explanation(parsed: ParsedAnalysis, text: str) -> str:
    match parsed.soil_condition:
        case str() as condition:
            return condition
        case _:
            return text[:EXPLANATION_PREVIEW_CHARS] + EXPLANATION_ELLIPSIS


def build_soil_analysis(parsed: ParsedAnalysis, text: str) -> SoilAnalysis:
    return SoilAnalysis(
        issue=parsed.soil_condition or DEFAULT_ISSUE,
        explanation=_explanation(parsed, text),
        recommendations=tuple(parsed.recommendations or DEFAULT_RECOMMENDATIONS),
        suggested_crops=tuple(parsed.suggested_crops or DEFAULT_CROPS),
    )


def recover_raw_text(payload: Any) -> str:
    """Best-effort text lookup on a payload that may not validate at all."""
    try:
        return ProviderResponse.model_validate(payload).first_text() or NO_RESPONSE_TEXT
    except ValidationError:
        return NO_RESPONSE_TEXT


def hard_default(payload: Any, error: str) -> NormalizedAnalysis:
    return NormalizedAnalysis(
        timestamp=_now(),
        detected_objects=(),
        soil_analysis=SoilAnalysis(
            issue=FALLBACK_ISSUE,
            explanation=FALLBACK_EXPLANATION,
            recommendations=FALLBACK_RECOMMENDATIONS,
            suggested_crops=FALLBACK_CROPS,
        ),
        raw_response=payload,
        raw_text=recover_raw_text(payload),
        error=error,
    )


def normalize_response(payload: Any) -> NormalizedAnalysis:
    """Map a raw generateContent payload onto a NormalizedAnalysis. Never raises."""
    try:
        text = ProviderResponse.model_validate(payload).first_text()
        if text is None:
            raise ValueError(MSG_ERR_NO_TEXT)
        logger.debug(MSG_GENERATED_TEXT, text)

        parsed = parse_generated_text(text)
        return NormalizedAnalysis(
            timestamp=_now(),
            detected_objects=tuple(
                DetectedObject(label=obj.label, confidence=obj.confidence)
                for obj in parsed.detected_objects
            ),
            soil_analysis=build_soil_analysis(parsed, text),
            raw_response=payload,
            raw_text=text,
            soil_type=parsed.soil_type,
            confidence_score=parsed.confidence_score,
        )
    except Exception as e:
        logger.exception(MSG_NORMALIZE_FAILED)
        return hard_default(payload, str(e))
