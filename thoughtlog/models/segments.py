"""
Segment model definitions
Transient classifier fragments (raw and processed) and extraction results.
None of these are persisted directly.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ConfigDict, Field

from thoughtlog.config.loader import get_config

from .base import BaseModel
from .defaults import (
    DEFAULT_MIN_CONFIDENCE,
    DEFAULT_REVIEW_THRESHOLD,
    ConfidenceLevel,
    SegmentType,
)

# Keys of a classifier fragment that map onto RawSegment fields;
# everything else is carried along as extras
_RAW_FIELDS = {"type", "text", "content", "confidence", "timestamp", "metadata"}


class RawSegment(BaseModel):
    """One classifier fragment as received: free-form type label, loose confidence"""

    type: str
    text: str
    confidence: Optional[float] = None  # 0-1 or 0-100
    timestamp: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None
    extras: Optional[Dict[str, Any]] = None  # priority, category, topic...

    @classmethod
    def from_payload(cls, payload: Union["RawSegment", Mapping[str, Any]]) -> "RawSegment":
        """Build from a decoded classifier fragment

        Accepts `text` or `content` for the fragment text. Unknown keys such as
        priority, category or topic are kept in extras, metadata passes through as is.
        """
        if isinstance(payload, RawSegment):
            return payload
        if not isinstance(payload, Mapping):
            raise TypeError(f"Segment must be an object, got {type(payload).__name__}")

        extras = {
            k: v for k, v in payload.items() if k not in _RAW_FIELDS and v is not None
        }

        text = payload.get("text")
        if text is None:
            text = payload.get("content")

        return cls(
            type=payload.get("type"),
            text=text,
            confidence=payload.get("confidence"),
            timestamp=payload.get("timestamp"),
            metadata=payload.get("metadata"),
            extras=extras or None,
        )


class ProcessedSegment(BaseModel):
    """Normalized fragment: canonical type, confidence in [0, 1], derived flags"""

    type: SegmentType
    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    confidence_level: ConfidenceLevel
    needs_review: bool
    timestamp: datetime
    metadata: Optional[Dict[str, Any]] = None
    extras: Optional[Dict[str, Any]] = None


class ExtractionConfig(BaseModel):
    """Batch extraction policy"""

    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    review_threshold: float = DEFAULT_REVIEW_THRESHOLD
    sort_by_type: bool = True
    normalize_confidence: bool = True
    repair_json: bool = False

    @classmethod
    def from_config(cls) -> "ExtractionConfig":
        """Build from the [extraction] configuration section"""
        config = get_config()
        return cls(
            min_confidence=config.get("extraction.min_confidence", DEFAULT_MIN_CONFIDENCE),
            review_threshold=config.get(
                "extraction.review_threshold", DEFAULT_REVIEW_THRESHOLD
            ),
            sort_by_type=config.get("extraction.sort_by_type", True),
            normalize_confidence=config.get("extraction.normalize_confidence", True),
            repair_json=config.get("extraction.repair_json", False),
        )


def _zero_by_type() -> Dict[SegmentType, int]:
    return {segment_type: 0 for segment_type in SegmentType}


def _zero_by_level() -> Dict[ConfidenceLevel, int]:
    return {level: 0 for level in ConfidenceLevel}


class ExtractionStats(BaseModel):
    """Aggregate counts over a list of processed segments"""

    total: int = 0
    by_type: Dict[SegmentType, int] = Field(default_factory=_zero_by_type)
    by_confidence_level: Dict[ConfidenceLevel, int] = Field(default_factory=_zero_by_level)
    needs_review: int = 0


class ExtractionResult(BaseModel):
    """Output of a batch extraction"""

    segments: List[ProcessedSegment] = Field(default_factory=list)
    stats: ExtractionStats = Field(default_factory=ExtractionStats)
    skipped: int = 0


# ============ Classifier payload contract ============


class AnalysisSegment(BaseModel):
    """Segment as produced by the external classifier"""

    model_config = ConfigDict(extra="ignore")

    type: str
    text: str
    confidence: Optional[float] = None
    priority: Optional[str] = None  # high / medium / low, todos only
    category: Optional[str] = None  # ideas only
    topic: Optional[str] = None  # learnings only


class AnalysisResult(BaseModel):
    """Classifier output: transcript plus its segments"""

    model_config = ConfigDict(extra="ignore")

    transcript: str
    segments: List[AnalysisSegment] = Field(default_factory=list)
