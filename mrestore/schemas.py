"""Data contracts: the provider payload, the parsed intermediate and the normalized record.

Provider and parsed models are pydantic so that untrusted JSON is validated on the
way in; request and result records are frozen dataclasses owned by this package.
"""
from dataclasses import asdict, dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from mrestore.constants import DEFAULT_IMAGE_MIME_TYPE, PROVIDER_NAME


# ── provider payload ──────────────────────────────────────────────────────────


def _lenient(model: type[BaseModel], value: Any) -> Optional[BaseModel]:
    try:
        return model.model_validate(value)
    except ValidationError:
        return None


def _lenient_items(model: type[BaseModel], value: Any) -> list:
    match value:
        case list() | tuple() as items:
            return [_lenient(model, item) for item in items]
        case _:
            return []


class Part(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class Content(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parts: list[Optional[Part]] = []

    @field_validator("parts", mode="before")
    @classmethod
    def _parts(cls, value: Any) -> list:
        return _lenient_items(Part, value)


class Candidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: Optional[Content] = None

    @field_validator("content", mode="before")
    @classmethod
    def _content(cls, value: Any) -> Optional[Content]:
        return _lenient(Content, value)


class ProviderResponse(BaseModel):
    """Raw generateContent payload.

    Each level validates on its own: a malformed candidate or part becomes ``None``
    and never invalidates its siblings. Only a non-object payload fails validation.
    """

    model_config = ConfigDict(extra="ignore")

    candidates: list[Optional[Candidate]] = []

    @field_validator("candidates", mode="before")
    @classmethod
    def _candidates(cls, value: Any) -> list:
        return _lenient_items(Candidate, value)

    def first_candidate(self) -> Optional[Candidate]:
        return self.candidates[0] if self.candidates else None

    def first_part(self) -> Optional[Part]:
        candidate = self.first_candidate()
        match candidate:
            case Candidate(content=Content(parts=[Part() as first, *_])):
                return first
            case _:
                return None

    def first_text(self) -> Optional[str]:
        part = self.first_part()
        return part.text if part is not None and part.text else None


# ── parsed intermediate ───────────────────────────────────────────────────────


def _as_text_list(value: Any) -> Optional[list[str]]:
    match value:
        case None | "" | []:
            return None
        case str() as s:
            return [s]
        case list() | tuple() as items:
            texts = [str(item) for item in items if item not in (None, "")]
            return texts or None
        case _:
            return [str(value)]


def _as_confidence(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class DetectedObjectModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    label: str
    confidence: Optional[float] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> Optional[float]:
        return _as_confidence(value)


def _as_detected_object(item: Any) -> Optional[dict]:
    match item:
        case str() as label if label:
            return {"label": label}
        case {"label": label, **rest} if label:
            return {"label": str(label), "confidence": rest.get("confidence")}
        case {"name": label, **rest} if label:
            return {"label": str(label), "confidence": rest.get("confidence")}
        case {"object": label, **rest} if label:
            return {"label": str(label), "confidence": rest.get("confidence")}
        case _:
            return None


class ParsedAnalysis(BaseModel):
    """Best-effort decode of the model's answer. Every field may be absent."""

    model_config = ConfigDict(extra="ignore")

    soil_condition: Optional[str] = None
    detected_objects: list[DetectedObjectModel] = []
    soil_type: Optional[str] = None
    recommendations: Optional[list[str]] = None
    suggested_crops: Optional[list[str]] = None
    confidence_score: Optional[float] = None

    @field_validator("soil_condition", "soil_type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        match value:
            case None | "":
                return None
            case str() as s:
                return s
            case _:
                return str(value)

    @field_validator("recommendations", "suggested_crops", mode="before")
    @classmethod
    def _coerce_text_list(cls, value: Any) -> Optional[list[str]]:
        return _as_text_list(value)

    @field_validator("detected_objects", mode="before")
    @classmethod
    def _coerce_objects(cls, value: Any) -> list[dict]:
        match value:
            case list() | tuple() as items:
                return [obj for obj in map(_as_detected_object, items) if obj is not None]
            case _:
                return []

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> Optional[float]:
        return _as_confidence(value)


# ── request / result records ──────────────────────────────────────────────────


@dataclass(frozen=True)
class AnalysisRequest:
    image: bytes
    user_id: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE


@dataclass(frozen=True)
class DetectedObject:
    label: str
    confidence: Optional[float] = None


@dataclass(frozen=True)
class SoilAnalysis:
    issue: str
    explanation: str
    recommendations: tuple[str, ...]
    suggested_crops: tuple[str, ...]


@dataclass(frozen=True)
class NormalizedAnalysis:
    timestamp: str
    detected_objects: tuple[DetectedObject, ...]
    soil_analysis: SoilAnalysis
    raw_response: Any
    raw_text: str
    provider: str = PROVIDER_NAME
    error: Optional[str] = None
    soil_type: Optional[str] = None
    confidence_score: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready record. Optional fields are omitted when absent."""
        result = {
            "provider": self.provider,
            "timestamp": self.timestamp,
            "detected_objects": [asdict(obj) for obj in self.detected_objects],
            "soil_analysis": {
                "issue": self.soil_analysis.issue,
                "explanation": self.soil_analysis.explanation,
                "recommendations": list(self.soil_analysis.recommendations),
                "suggested_crops": list(self.soil_analysis.suggested_crops),
            },
            "raw_response": self.raw_response,
            "raw_text": self.raw_text,
        }
        optional = {
            "error": self.error,
            "soil_type": self.soil_type,
            "confidence_score": self.confidence_score,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result
