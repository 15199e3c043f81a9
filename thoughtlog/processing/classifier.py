"""
Segment classifier
Pure functions normalizing one raw classifier fragment: type synonym resolution,
confidence scale normalization, confidence bucketing and review flag derivation
"""

import math
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from thoughtlog.core.errors import EmptySegmentContent, InvalidSegmentType
from thoughtlog.models.defaults import (
    DEFAULT_CONFIDENCE,
    HIGH_CONFIDENCE_THRESHOLD,
    MEDIUM_CONFIDENCE_THRESHOLD,
    SEGMENT_TYPE_SYNONYMS,
    ConfidenceLevel,
    SegmentType,
)
from thoughtlog.models.segments import ExtractionConfig, ProcessedSegment, RawSegment


def validate_segment_type(raw_type: Union[str, SegmentType]) -> SegmentType:
    """
    Resolve a free-form type label to its canonical segment type

    Lookup is case-insensitive and ignores surrounding whitespace.

    Raises:
        InvalidSegmentType: The label is not a known type or synonym
    """
    if isinstance(raw_type, SegmentType):
        return raw_type
    if not isinstance(raw_type, str):
        raise InvalidSegmentType(raw_type)

    segment_type = SEGMENT_TYPE_SYNONYMS.get(raw_type.strip().lower())
    if segment_type is None:
        raise InvalidSegmentType(raw_type)
    return segment_type


def normalize_confidence(raw: Optional[float] = None) -> float:
    """
    Normalize a classifier confidence to [0, 1]

    None means neutral (0.5). Values already in [0, 1] pass through; anything
    else is read as a 0-100 percentage. The result is clamped to [0, 1].
    """
    if raw is None:
        return DEFAULT_CONFIDENCE

    value = float(raw)
    if math.isnan(value):
        return DEFAULT_CONFIDENCE

    if 0.0 <= value <= 1.0:
        return value

    return min(1.0, max(0.0, value / 100.0))


def get_confidence_level(confidence: float) -> ConfidenceLevel:
    """Bucket a normalized confidence: high > 0.8, medium in [0.5, 0.8], low < 0.5"""
    if confidence > HIGH_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.HIGH
    if confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def validate_content(text: Any) -> str:
    """Return the trimmed segment text, rejecting empty or whitespace-only content"""
    if not isinstance(text, str) or not text.strip():
        raise EmptySegmentContent()
    return text.strip()


def process_segment(
    raw: Union[RawSegment, Mapping[str, Any]],
    config: Optional[ExtractionConfig] = None,
) -> ProcessedSegment:
    """
    Turn one raw fragment into a ProcessedSegment

    Args:
        raw: RawSegment or decoded fragment mapping
        config: Extraction policy, defaults to ExtractionConfig()

    Returns:
        ProcessedSegment with canonical type, trimmed text and derived flags

    Raises:
        InvalidSegmentType: Type label does not resolve
        EmptySegmentContent: Text is empty after trimming
    """
    config = config or ExtractionConfig()
    raw = RawSegment.from_payload(raw)

    segment_type = validate_segment_type(raw.type)
    text = validate_content(raw.text)

    # Percent values are scaled and clamped with or without normalize_confidence
    confidence = normalize_confidence(raw.confidence)

    return ProcessedSegment(
        type=segment_type,
        text=text,
        confidence=confidence,
        confidence_level=get_confidence_level(confidence),
        needs_review=confidence < config.review_threshold,
        timestamp=raw.timestamp or datetime.now(),
        metadata=raw.metadata,
        extras=raw.extras,
    )
