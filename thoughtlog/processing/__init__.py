"""
Processing pipeline
Classifier output -> extraction -> atomic storage, plus retry bookkeeping
"""

from .classifier import (
    get_confidence_level,
    normalize_confidence,
    process_segment,
    validate_content,
    validate_segment_type,
)
from .extractor import (
    calculate_stats,
    extract_segments,
    parse_and_extract,
    sort_segments_by_type,
)
from .retry_ledger import RetryLedger, RetryPolicy, RetrySummary
from .storage import StorageCoordinator, get_storage, map_priority, map_segment

__all__ = [
    "validate_segment_type",
    "normalize_confidence",
    "get_confidence_level",
    "validate_content",
    "process_segment",
    "sort_segments_by_type",
    "calculate_stats",
    "extract_segments",
    "parse_and_extract",
    "StorageCoordinator",
    "get_storage",
    "map_priority",
    "map_segment",
    "RetryLedger",
    "RetryPolicy",
    "RetrySummary",
]
