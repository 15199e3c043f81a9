"""
Retry ledger
Bookkeeping for logs whose analysis failed. Decides which pending logs are still
eligible, how long to wait before the next attempt and when to give up. Retries
are driven by the caller; nothing here schedules work on its own.
"""

import threading
from dataclasses import dataclass
from datetime import date as date_type
from typing import List, Optional, Union

from thoughtlog.core.errors import NotFoundError, ValidationError
from thoughtlog.core.logger import get_logger
from thoughtlog.core.protocols import SegmentAnalyzer
from thoughtlog.models.defaults import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from thoughtlog.models.entities import Log, LogWithSegments
from thoughtlog.models.segments import ExtractionConfig

from .extractor import parse_and_extract
from .storage import StorageCoordinator, get_storage

logger = get_logger(__name__)


@dataclass
class RetryPolicy:
    """Retry limits; retry_delay is in seconds"""

    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    exponential_backoff: bool = True

    @classmethod
    def from_config(cls) -> "RetryPolicy":
        """Build from the [retry] configuration section"""
        from thoughtlog.config.loader import get_config

        config = get_config()
        return cls(
            max_retries=int(config.get("retry.max_retries", DEFAULT_MAX_RETRIES)),
            retry_delay=float(config.get("retry.retry_delay", DEFAULT_RETRY_DELAY)),
            exponential_backoff=bool(config.get("retry.exponential_backoff", True)),
        )


@dataclass
class RetrySummary:
    """Outcome counts of a retry_all() run"""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0


class RetryLedger:
    """Pending analysis state machine on top of the storage coordinator

    PendingAnalysis (pending, retry_count=0) -> AnalysisSucceeded on success, or
    AnalysisFailed (retry_count += 1, last_error set, still pending) on failure.
    A log whose retry_count reached max_retries is exhausted: it stays pending
    and is reported by get_exhausted(), but is no longer retried.
    """

    def __init__(
        self,
        storage: Optional[StorageCoordinator] = None,
        policy: Optional[RetryPolicy] = None,
        extraction_config: Optional[ExtractionConfig] = None,
    ):
        self.storage = storage or get_storage()
        self.policy = policy or RetryPolicy.from_config()
        self.extraction_config = extraction_config
        self._run_lock = threading.Lock()

    # ==================== State queries ====================

    def create_pending_log(
        self,
        date: Union[str, date_type],
        audio_path: Optional[str] = None,
        transcript: Optional[str] = None,
    ) -> Log:
        """Create a log awaiting analysis (pending, retry_count=0)"""
        log = self.storage.db.create_log(
            date=date, audio_path=audio_path, transcript=transcript, pending_analysis=True
        )
        logger.info(f"Created pending log {log.id}")
        return log

    def is_exhausted(self, log: Log) -> bool:
        return log.retry_count >= self.policy.max_retries

    def get_pending(self) -> List[Log]:
        """Pending logs that may still be retried"""
        return [log for log in self.storage.db.get_pending_logs() if not self.is_exhausted(log)]

    def get_exhausted(self) -> List[Log]:
        """Pending logs that ran out of retries"""
        return [log for log in self.storage.db.get_pending_logs() if self.is_exhausted(log)]

    def next_delay(self, log: Log) -> float:
        """Seconds to wait before the next attempt for this log"""
        if self.policy.exponential_backoff:
            return self.policy.retry_delay * (2 ** log.retry_count)
        return self.policy.retry_delay

    # ==================== Transitions ====================

    def mark_failed(self, log_id: int, error: Union[str, BaseException]) -> Log:
        log = self.storage.record_analysis_failure(log_id, error)
        if self.is_exhausted(log):
            logger.error(
                f"Log {log_id} exhausted its retries ({log.retry_count}/{self.policy.max_retries})"
            )
        return log

    def mark_succeeded(self, log_id: int) -> Log:
        return self.storage.db.mark_log_as_analyzed(log_id)

    def reset(self, log_id: int) -> Log:
        """Make an exhausted log eligible again"""
        log = self.storage.db.reset_retry_count(log_id)
        logger.info(f"Reset retry count of log {log_id}")
        return log

    # ==================== Driving retries ====================

    def retry(self, log_id: int, analyzer: SegmentAnalyzer) -> bool:
        """
        Run the analyzer for one pending log and record the outcome

        Returns:
            True if the log was analyzed and saved, False if it was not eligible

        Raises:
            NotFoundError: The log does not exist
            ValidationError: The log has no transcript to analyze
            Exception: Whatever the analyzer or the save raised, after the
                failure has been recorded
        """
        log = self.storage.db.get_log_by_id(log_id)
        if log is None:
            raise NotFoundError("Log", log_id)

        if not log.pending_analysis:
            logger.debug(f"Log {log_id} is not pending, skipping")
            return False
        if self.is_exhausted(log):
            logger.debug(f"Log {log_id} exhausted its retries, skipping")
            return False
        if not log.transcript:
            raise ValidationError(f"Log {log_id} has no transcript to analyze")

        try:
            self._analyze(log, analyzer)
        except Exception as e:
            self.mark_failed(log_id, e)
            raise

        logger.info(f"Retry of log {log_id} succeeded")
        return True

    def retry_all(self, analyzer: SegmentAnalyzer) -> RetrySummary:
        """Retry every eligible pending log in turn; one failure does not stop the run"""
        summary = RetrySummary()

        if not self._run_lock.acquire(blocking=False):
            logger.warning("Retry run already in progress, skipping")
            return summary

        try:
            for log in self.storage.db.get_pending_logs():
                if self.is_exhausted(log) or not log.transcript:
                    summary.skipped += 1
                    continue

                try:
                    retried = self.retry(log.id, analyzer)
                except Exception as e:
                    summary.attempted += 1
                    summary.failed += 1
                    logger.warning(f"Retry of log {log.id} failed: {e}")
                    continue

                if retried:
                    summary.attempted += 1
                    summary.succeeded += 1
                else:
                    summary.skipped += 1
        finally:
            self._run_lock.release()

        logger.info(
            f"Retry run finished: {summary.attempted} attempted, {summary.succeeded} succeeded, "
            f"{summary.failed} failed, {summary.skipped} skipped"
        )
        return summary

    def _analyze(self, log: Log, analyzer: SegmentAnalyzer) -> LogWithSegments:
        payload = analyzer.analyze(log.transcript)
        config = self.extraction_config or ExtractionConfig.from_config()
        extraction = parse_and_extract(payload, config)
        return self.storage.complete_pending_analysis(
            log.id, log.transcript, extraction.segments
        )
