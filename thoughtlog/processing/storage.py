"""
Storage coordinator
Maps classified segments and their transcript onto log entities and commits them
as one all-or-nothing unit
"""

from datetime import date as date_type
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from thoughtlog.core.db import DatabaseManager, get_db
from thoughtlog.core.errors import InvalidSegmentType, NotFoundError, ValidationError
from thoughtlog.core.logger import get_logger
from thoughtlog.models.defaults import (
    DEFAULT_IDEA_STATUS,
    DEFAULT_IMPACT,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PRIORITY,
    DEFAULT_TODO_COMPLETED,
    PRIORITY_BY_LABEL,
    SegmentType,
)
from thoughtlog.models.entities import Log, LogWithSegments
from thoughtlog.models.segments import ExtractionConfig

from .classifier import normalize_confidence, validate_segment_type
from .extractor import parse_and_extract

logger = get_logger(__name__)

SegmentInput = Union[Mapping[str, Any], Any]
MappedSegment = Tuple[SegmentType, Dict[str, Any]]


def map_priority(value: Any) -> int:
    """Map a priority label (high/medium/low) to its ordinal; anything else is medium"""
    if isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 3:
        return value
    if isinstance(value, str):
        priority = PRIORITY_BY_LABEL.get(value.strip().lower())
        if priority is not None:
            return int(priority)
    if value is not None:
        logger.debug(f"Unknown todo priority {value!r}, using default")
    return int(DEFAULT_PRIORITY)


def _segment_field(segment: SegmentInput, name: str) -> Any:
    """Read a field from the segment itself, falling back to its extras"""
    if isinstance(segment, Mapping):
        value = segment.get(name)
        extras = segment.get("extras")
    else:
        value = getattr(segment, name, None)
        extras = getattr(segment, "extras", None)

    if value is None and isinstance(extras, Mapping):
        value = extras.get(name)
    return value


def _map_confidence(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return normalize_confidence(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid segment confidence {value!r}") from e


def map_segment(segment: SegmentInput) -> Optional[MappedSegment]:
    """
    Map one classifier segment to the column values of its entity

    Returns None when the segment type does not resolve.
    """
    try:
        segment_type = validate_segment_type(_segment_field(segment, "type"))
    except InvalidSegmentType as e:
        logger.warning(f"Skipping segment with unresolvable type: {e}")
        return None

    text = _segment_field(segment, "text")
    if text is None:
        text = _segment_field(segment, "content")
    if isinstance(text, str):
        text = text.strip()

    if segment_type == SegmentType.TODO:
        return segment_type, {
            "text": text,
            "completed": DEFAULT_TODO_COMPLETED,
            "priority": map_priority(_segment_field(segment, "priority")),
            "confidence": _map_confidence(_segment_field(segment, "confidence")),
        }

    if segment_type == SegmentType.IDEA:
        category = _segment_field(segment, "category")
        return segment_type, {
            "text": text,
            "status": DEFAULT_IDEA_STATUS,
            "tags": [category] if category else None,
        }

    if segment_type == SegmentType.LEARNING:
        return segment_type, {
            "text": text,
            "category": _segment_field(segment, "topic"),
        }

    return segment_type, {"text": text, "impact": DEFAULT_IMPACT}


class StorageCoordinator:
    """Atomic persistence of analysis results and their read-back"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self._db = db

    @property
    def db(self) -> DatabaseManager:
        return self._db or get_db()

    # ==================== Writes ====================

    def save_analysis_result(
        self,
        transcript: str,
        segments: Iterable[SegmentInput],
        audio_path: Optional[str] = None,
        date: Optional[Union[str, date_type]] = None,
    ) -> LogWithSegments:
        """
        Save a transcript and its segments as a new, analyzed log

        Either the log and every child row are committed, or nothing is.

        Args:
            transcript: Journal entry transcript
            segments: AnalysisSegment, ProcessedSegment or plain mappings
            audio_path: Optional audio reference
            date: Log date, defaults to today

        Returns:
            The saved log with all four child collections

        Raises:
            ValidationError: Transcript or segment text is invalid
            DatabaseError: Storage failure; nothing was committed
        """
        mapped = self._map_segments(segments)
        self._validate_transcript(transcript)

        if date is None:
            date = datetime.now().date()
        if isinstance(date, date_type):
            date = date.isoformat()

        db = self.db
        with db.transaction():
            log = db.create_log(date=date, audio_path=audio_path, transcript=transcript)
            self._insert_segments(log.id, mapped)
            result = db.get_log_with_segments(log.id)

        logger.info(
            f"Saved log {result.id} with {result.segment_count} segments "
            f"({len(result.todos)} todos, {len(result.ideas)} ideas, "
            f"{len(result.learnings)} learnings, {len(result.accomplishments)} accomplishments)"
        )
        return result

    def save_extraction(
        self,
        transcript: str,
        payload: Union[str, Mapping[str, Any]],
        config: Optional[ExtractionConfig] = None,
        audio_path: Optional[str] = None,
        date: Optional[Union[str, date_type]] = None,
    ) -> LogWithSegments:
        """Decode a classifier payload, extract its segments and save them"""
        extraction = parse_and_extract(payload, config or ExtractionConfig.from_config())
        return self.save_analysis_result(
            transcript, extraction.segments, audio_path=audio_path, date=date
        )

    def complete_pending_analysis(
        self, log_id: int, transcript: str, segments: Iterable[SegmentInput]
    ) -> LogWithSegments:
        """Attach segments to an existing pending log and mark it analyzed, atomically"""
        mapped = self._map_segments(segments)
        self._validate_transcript(transcript)

        db = self.db
        with db.transaction():
            if db.get_log_by_id(log_id) is None:
                raise NotFoundError("Log", log_id)
            db.update_log(log_id, transcript=transcript)
            self._insert_segments(log_id, mapped)
            db.mark_log_as_analyzed(log_id)
            result = db.get_log_with_segments(log_id)

        logger.info(f"Completed pending analysis of log {log_id}: {result.segment_count} segments")
        return result

    def record_analysis_failure(self, log_id: int, error: Union[str, BaseException]) -> Log:
        """Record a failed analysis: retry_count += 1, last_error set, still pending"""
        message = str(error) or type(error).__name__
        log = self.db.mark_log_as_pending(log_id, message)
        logger.warning(
            f"Analysis of log {log_id} failed (attempt {log.retry_count}): {message}"
        )
        return log

    def delete_log(self, log_id: int) -> None:
        """Delete a log and, through the foreign key cascade, all of its segments"""
        self.db.delete_log(log_id)
        logger.info(f"Deleted log {log_id}")

    # ==================== Reads ====================

    def get_log_with_segments(self, log_id: int) -> Optional[LogWithSegments]:
        return self.db.get_log_with_segments(log_id)

    def get_all_logs_with_segments(
        self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> List[LogWithSegments]:
        """Get a page of logs, newest first, each with its segments"""
        db = self.db
        with db.read_snapshot():
            logs = db.get_all_logs(limit=limit, offset=offset)
            return [db.get_log_with_segments(log.id) for log in logs]

    # ==================== Helpers ====================

    def _validate_transcript(self, transcript: Any) -> None:
        if not isinstance(transcript, str):
            raise ValidationError("Transcript must be a string")
        max_length = self.db.limits.transcript
        if len(transcript) > max_length:
            raise ValidationError(
                f"Transcript exceeds maximum length of {max_length} characters "
                f"(got {len(transcript)})"
            )

    @staticmethod
    def _map_segments(segments: Iterable[SegmentInput]) -> List[MappedSegment]:
        if segments is None:
            return []
        return [mapped for mapped in map(map_segment, segments) if mapped is not None]

    def _insert_segments(self, log_id: int, mapped: List[MappedSegment]) -> None:
        db = self.db
        for segment_type, values in mapped:
            if segment_type == SegmentType.TODO:
                db.create_todo(log_id, **values)
            elif segment_type == SegmentType.IDEA:
                db.create_idea(log_id, **values)
            elif segment_type == SegmentType.LEARNING:
                db.create_learning(log_id, **values)
            else:
                db.create_accomplishment(log_id, **values)


# Global storage coordinator instance
_storage: Optional[StorageCoordinator] = None


def get_storage() -> StorageCoordinator:
    """Get the storage coordinator bound to the global database manager"""
    global _storage
    if _storage is None:
        _storage = StorageCoordinator()
    return _storage
