"""
Segment extractor
Runs the classifier over a batch of fragments, applies the filter/sort policy
and computes aggregate statistics. A bad fragment is skipped, never fatal.
"""

from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ValidationError as PydanticValidationError

from thoughtlog.core.errors import InvalidResponseStructure, SegmentError
from thoughtlog.core.json_parser import load_json_payload
from thoughtlog.core.logger import get_logger
from thoughtlog.models.defaults import SEGMENT_TYPE_ORDER
from thoughtlog.models.segments import (
    ExtractionConfig,
    ExtractionResult,
    ExtractionStats,
    ProcessedSegment,
    RawSegment,
)

from .classifier import process_segment

logger = get_logger(__name__)


def sort_segments_by_type(segments: Iterable[ProcessedSegment]) -> List[ProcessedSegment]:
    """Order by type (todo, idea, learning, accomplishment), then confidence descending"""
    return sorted(
        segments,
        key=lambda segment: (SEGMENT_TYPE_ORDER[segment.type], -segment.confidence),
    )


def calculate_stats(segments: Iterable[ProcessedSegment]) -> ExtractionStats:
    """Count segments per type, per confidence level and flagged for review"""
    stats = ExtractionStats()
    for segment in segments:
        stats.total += 1
        stats.by_type[segment.type] += 1
        stats.by_confidence_level[segment.confidence_level] += 1
        if segment.needs_review:
            stats.needs_review += 1
    return stats


def extract_segments(
    raw_segments: Iterable[Union[RawSegment, Mapping[str, Any]]],
    config: Optional[ExtractionConfig] = None,
) -> ExtractionResult:
    """
    Process a batch of raw fragments

    Fragments that fail classification are skipped and counted in
    ExtractionResult.skipped. Fragments below config.min_confidence are dropped
    silently.
    """
    config = config or ExtractionConfig()

    processed: List[ProcessedSegment] = []
    skipped = 0

    for index, raw in enumerate(raw_segments):
        try:
            segment = process_segment(raw, config)
        except (SegmentError, PydanticValidationError, TypeError) as e:
            skipped += 1
            logger.warning(f"Skipping segment {index}: {e}")
            continue

        if segment.confidence < config.min_confidence:
            logger.debug(
                f"Filtered segment {index}: confidence {segment.confidence:.2f} "
                f"below minimum {config.min_confidence:.2f}"
            )
            continue

        processed.append(segment)

    if config.sort_by_type:
        processed = sort_segments_by_type(processed)

    stats = calculate_stats(processed)
    logger.debug(
        f"Extracted {stats.total} segments ({skipped} skipped, "
        f"{stats.needs_review} need review)"
    )
    return ExtractionResult(segments=processed, stats=stats, skipped=skipped)


def parse_and_extract(
    payload: Union[str, Mapping[str, Any], PydanticBaseModel],
    config: Optional[ExtractionConfig] = None,
) -> ExtractionResult:
    """
    Decode a classifier payload and extract its segments

    Args:
        payload: Encoded JSON text, or an already decoded object
        config: Extraction policy

    Raises:
        ResponseParseError: Encoded payload is not decodable
        InvalidResponseStructure: Decoded payload has no "segments" list
    """
    config = config or ExtractionConfig()

    if isinstance(payload, str):
        data = load_json_payload(payload, repair=config.repair_json)
    elif isinstance(payload, PydanticBaseModel):
        data = payload.model_dump(by_alias=False)
    else:
        data = payload

    if not isinstance(data, Mapping):
        raise InvalidResponseStructure(
            f"Invalid response structure: expected an object, got {type(data).__name__}"
        )

    segments = data.get("segments")
    if not isinstance(segments, list):
        raise InvalidResponseStructure(
            "Invalid response structure: missing or invalid 'segments' array"
        )

    return extract_segments(segments, config)
