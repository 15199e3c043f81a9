"""
Request models for the HTTP API
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from .base import BaseModel

# ============================================================================
# Log Module Request Models
# ============================================================================


class AnalyzeLogRequest(BaseModel):
    """Request parameters for saving a classifier result.

    @property transcript - Transcript of the journal entry.
    @property segments - Classifier fragments (type, text, optional confidence/priority/category/topic).
    @property audioPath - Optional reference to the recorded audio.
    @property date - Optional log date (YYYY-MM-DD), defaults to today.
    """

    transcript: str
    segments: List[Dict[str, Any]] = Field(default_factory=list)
    audio_path: Optional[str] = None
    date: Optional[str] = None


class ExtractSegmentsRequest(BaseModel):
    """Request parameters for classifying a payload without saving it.

    @property payload - Encoded classifier response or decoded object with a segments list.
    @property minConfidence - Optional override of the minimum confidence filter.
    @property reviewThreshold - Optional override of the review threshold.
    """

    payload: Union[str, Dict[str, Any]]
    min_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    review_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class GetLogRequest(BaseModel):
    """Request parameters for getting a log with its segments.

    @property logId - Log ID.
    """

    log_id: int


class ListLogsRequest(BaseModel):
    """Request parameters for listing logs with their segments.

    @property limit - Maximum number of logs to return (1-1000).
    @property offset - Number of logs to skip.
    """

    limit: int = Field(default=100, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


class DeleteLogRequest(BaseModel):
    """Request parameters for deleting a log and all of its segments.

    @property logId - Log ID.
    """

    log_id: int


class ResetRetriesRequest(BaseModel):
    """Request parameters for resetting a log's retry counter.

    @property logId - Log ID.
    """

    log_id: int
