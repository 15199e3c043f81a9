"""
Log module command handlers
"""

from datetime import datetime
from typing import Any, Dict

from thoughtlog.core.errors import NotFoundError, SegmentError, ThoughtLogError
from thoughtlog.core.logger import get_logger
from thoughtlog.models import (
    AnalyzeLogRequest,
    DeleteLogRequest,
    ExtractionConfig,
    ExtractSegmentsRequest,
    GetLogRequest,
    ListLogsRequest,
    ResetRetriesRequest,
)
from thoughtlog.processing.extractor import parse_and_extract
from thoughtlog.processing.retry_ledger import RetryLedger
from thoughtlog.processing.storage import get_storage

from . import api_handler

logger = get_logger(__name__)


def _failure(message: str, error: ThoughtLogError) -> Dict[str, Any]:
    return {
        "success": False,
        "message": f"{message}: {error}",
        "code": getattr(error, "code", type(error).__name__),
        "timestamp": datetime.now().isoformat(),
    }


@api_handler(body=AnalyzeLogRequest, path="/logs/analyze")
def analyze_log(body: AnalyzeLogRequest) -> Dict[str, Any]:
    """Save a classifier result as a new log.

    The log and all of its segments are written in one transaction.

    @param body - Transcript, classifier segments, optional audio path and date.
    @returns Saved log with its segments
    """
    try:
        result = get_storage().save_analysis_result(
            body.transcript, body.segments, audio_path=body.audio_path, date=body.date
        )
    except ThoughtLogError as e:
        logger.warning(f"Failed to save analysis result: {e}")
        return _failure("Failed to save analysis result", e)

    return {
        "success": True,
        "data": result.model_dump(mode="json"),
        "timestamp": datetime.now().isoformat(),
    }


@api_handler(body=ExtractSegmentsRequest, path="/logs/extract")
def extract_log_segments(body: ExtractSegmentsRequest) -> Dict[str, Any]:
    """Classify a payload without saving it.

    @param body - Classifier payload and optional policy overrides.
    @returns Processed segments, statistics and skipped count
    """
    config = ExtractionConfig.from_config()
    if body.min_confidence is not None:
        config.min_confidence = body.min_confidence
    if body.review_threshold is not None:
        config.review_threshold = body.review_threshold

    try:
        result = parse_and_extract(body.payload, config)
    except SegmentError as e:
        logger.warning(f"Failed to extract segments: {e}")
        return _failure("Failed to extract segments", e)

    return {
        "success": True,
        "data": result.model_dump(mode="json"),
        "timestamp": datetime.now().isoformat(),
    }


@api_handler(body=GetLogRequest, path="/logs/get")
def get_log(body: GetLogRequest) -> Dict[str, Any]:
    """Get a log with its segments.

    @param body - Log ID.
    @returns Log with segments, or a failure when it does not exist
    """
    log = get_storage().get_log_with_segments(body.log_id)
    if log is None:
        return {
            "success": False,
            "message": "Log not found",
            "code": "NOT_FOUND",
            "timestamp": datetime.now().isoformat(),
        }

    return {
        "success": True,
        "data": log.model_dump(mode="json"),
        "timestamp": datetime.now().isoformat(),
    }


@api_handler(body=ListLogsRequest, path="/logs/list")
def list_logs(body: ListLogsRequest) -> Dict[str, Any]:
    """List logs with their segments, newest first.

    @param body - Pagination (limit, offset).
    @returns Logs with segments
    """
    logs = get_storage().get_all_logs_with_segments(limit=body.limit, offset=body.offset)

    return {
        "success": True,
        "data": {
            "logs": [log.model_dump(mode="json") for log in logs],
            "count": len(logs),
            "limit": body.limit,
            "offset": body.offset,
        },
        "timestamp": datetime.now().isoformat(),
    }


@api_handler(body=DeleteLogRequest, path="/logs/delete")
def delete_log(body: DeleteLogRequest) -> Dict[str, Any]:
    """Delete a log and all of its segments.

    @param body - Log ID.
    @returns Deletion result
    """
    try:
        get_storage().delete_log(body.log_id)
    except NotFoundError as e:
        return _failure("Failed to delete log", e)

    return {
        "success": True,
        "message": "Log deleted",
        "data": {"deleted": True, "logId": body.log_id},
        "timestamp": datetime.now().isoformat(),
    }


@api_handler(path="/logs/pending")
def get_pending_logs() -> Dict[str, Any]:
    """Get logs awaiting analysis.

    @returns Retryable and exhausted pending logs
    """
    ledger = RetryLedger(get_storage())
    pending = ledger.get_pending()
    exhausted = ledger.get_exhausted()

    return {
        "success": True,
        "data": {
            "pending": [
                {**log.model_dump(mode="json"), "nextDelay": ledger.next_delay(log)}
                for log in pending
            ],
            "exhausted": [log.model_dump(mode="json") for log in exhausted],
            "maxRetries": ledger.policy.max_retries,
        },
        "timestamp": datetime.now().isoformat(),
    }


@api_handler(body=ResetRetriesRequest, path="/logs/reset-retries")
def reset_log_retries(body: ResetRetriesRequest) -> Dict[str, Any]:
    """Reset the retry counter of a log.

    @param body - Log ID.
    @returns Updated log
    """
    try:
        log = RetryLedger(get_storage()).reset(body.log_id)
    except NotFoundError as e:
        return _failure("Failed to reset retries", e)

    logger.info(f"Retries reset for log {body.log_id}")

    return {
        "success": True,
        "data": log.model_dump(mode="json"),
        "timestamp": datetime.now().isoformat(),
    }
