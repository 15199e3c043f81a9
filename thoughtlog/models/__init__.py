"""
Data models
Persisted entities, transient segment types and request bodies
"""

from .base import BaseModel
from .defaults import (
    AccomplishmentImpact,
    ConfidenceLevel,
    IdeaStatus,
    Priority,
    SegmentType,
)
from .entities import (
    Accomplishment,
    Idea,
    Learning,
    Log,
    LogWithSegments,
    Summary,
    Todo,
)
from .requests import (
    AnalyzeLogRequest,
    DeleteLogRequest,
    ExtractSegmentsRequest,
    GetLogRequest,
    ListLogsRequest,
    ResetRetriesRequest,
)
from .segments import (
    AnalysisResult,
    AnalysisSegment,
    ExtractionConfig,
    ExtractionResult,
    ExtractionStats,
    ProcessedSegment,
    RawSegment,
)

__all__ = [
    # Base
    "BaseModel",
    # Enums
    "SegmentType",
    "ConfidenceLevel",
    "IdeaStatus",
    "AccomplishmentImpact",
    "Priority",
    # Entities
    "Log",
    "Todo",
    "Idea",
    "Learning",
    "Accomplishment",
    "LogWithSegments",
    "Summary",
    # Segments
    "RawSegment",
    "ProcessedSegment",
    "ExtractionConfig",
    "ExtractionStats",
    "ExtractionResult",
    "AnalysisSegment",
    "AnalysisResult",
    # Requests
    "AnalyzeLogRequest",
    "ExtractSegmentsRequest",
    "GetLogRequest",
    "ListLogsRequest",
    "DeleteLogRequest",
    "ResetRetriesRequest",
]
