"""
SQLite database wrapper
Provides connection handling, transactions and CRUD for logs and their segments
"""

import json
import re
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date as date_type
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

from thoughtlog.core.errors import DatabaseError, NotFoundError, ValidationError
from thoughtlog.core.logger import get_logger
from thoughtlog.core.sqls import queries, schema
from thoughtlog.models import defaults
from thoughtlog.models.defaults import AccomplishmentImpact, IdeaStatus
from thoughtlog.models.entities import (
    Accomplishment,
    Idea,
    Learning,
    Log,
    LogWithSegments,
    Summary,
    Todo,
)

logger = get_logger(__name__)

T = TypeVar("T")

MEMORY_DB = ":memory:"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Whitelists for dynamic updates
ALLOWED_LOG_UPDATE_COLUMNS = {"audio_path", "transcript", "summary"}
ALLOWED_TODO_UPDATE_COLUMNS = {"text", "completed", "due_date", "priority"}
ALLOWED_IDEA_UPDATE_COLUMNS = {"text", "status", "tags"}


@dataclass
class TextLimits:
    """Maximum text lengths enforced before any write"""

    transcript: int = defaults.MAX_TRANSCRIPT_LENGTH
    summary: int = defaults.MAX_SUMMARY_LENGTH
    todo: int = defaults.MAX_TODO_LENGTH
    idea: int = defaults.MAX_IDEA_LENGTH
    learning: int = defaults.MAX_LEARNING_LENGTH
    accomplishment: int = defaults.MAX_ACCOMPLISHMENT_LENGTH

    @classmethod
    def from_config(cls) -> "TextLimits":
        """Build from the [validation] configuration section"""
        from thoughtlog.config.loader import get_config

        config = get_config()
        return cls(
            transcript=config.get("validation.max_transcript_length", cls.transcript),
            summary=config.get("validation.max_summary_length", cls.summary),
            todo=config.get("validation.max_todo_length", cls.todo),
            idea=config.get("validation.max_idea_length", cls.idea),
            learning=config.get("validation.max_learning_length", cls.learning),
            accomplishment=config.get(
                "validation.max_accomplishment_length", cls.accomplishment
            ),
        )


def _dump_list(values: Optional[Sequence[str]]) -> Optional[str]:
    """Serialize an ordered string list for a TEXT column"""
    if not values:
        return None
    return json.dumps([str(v) for v in values])


def _load_list(raw: Optional[str]) -> List[str]:
    """Deserialize a TEXT column written by _dump_list"""
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse stored list, returning empty list: {e}")
        return []
    if not isinstance(parsed, list):
        logger.warning(f"Stored list is not an array, returning empty list: {raw[:100]}")
        return []
    return [str(v) for v in parsed]


def _date_str(value: Union[str, date_type]) -> str:
    if isinstance(value, date_type):
        return value.isoformat()
    return value


class DatabaseManager:
    """Database manager

    Writes run inside transaction(): one writer at a time, BEGIN IMMEDIATE,
    commit on success and rollback on any exception. Gateway calls made on the
    same thread while a transaction is open join it (nested scopes become
    savepoints). Reads outside a transaction see committed data only.
    """

    def __init__(self, db_path: Optional[str] = None, limits: Optional[TextLimits] = None):
        if db_path is None:
            from thoughtlog.core.paths import get_db_path

            db_path = str(get_db_path())

        self.db_path = str(db_path)
        self.limits = limits or TextLimits()
        self._write_lock = threading.RLock()
        self._local = threading.local()
        self._shared_conn: Optional[sqlite3.Connection] = None

        if self.db_path == MEMORY_DB:
            # A private in-memory database only lives as long as its connection
            self._shared_conn = self._connect()

        self._init_database()

    # ==================== Setup ====================

    def _init_database(self):
        """Initialize database"""
        if self._shared_conn is None:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            with self.get_connection() as conn:
                conn.execute(queries.PRAGMA_JOURNAL_MODE_WAL)

        self._create_tables()
        logger.info(f"Database initialization completed: {self.db_path}")

    def _create_tables(self):
        """Create database tables"""
        with self.transaction() as conn:
            for table_sql in schema.ALL_TABLES:
                conn.execute(table_sql)

            for index_sql in schema.ALL_INDEXES:
                conn.execute(index_sql)

            conn.execute(queries.INSERT_SCHEMA_VERSION, (schema.SCHEMA_VERSION,))
        logger.debug("Database table creation completed")

    def get_schema_version(self) -> int:
        row = self.execute_one(queries.SELECT_SCHEMA_VERSION)
        return row["version"] if row and row["version"] is not None else 0

    def _connect(self) -> sqlite3.Connection:
        # isolation_level=None: transactions are opened explicitly by transaction()
        conn = sqlite3.connect(
            self.db_path,
            timeout=30.0,
            isolation_level=None,
            check_same_thread=self.db_path != MEMORY_DB,
        )
        conn.row_factory = sqlite3.Row
        conn.execute(queries.PRAGMA_FOREIGN_KEYS_ON)
        return conn

    def close(self) -> None:
        """Close the shared in-memory connection, if any"""
        if self._shared_conn is not None:
            self._shared_conn.close()
            self._shared_conn = None

    # ==================== Connections and transactions ====================

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get database connection context manager

        Joins the current thread's open transaction or snapshot when there is one
        """
        active = getattr(self._local, "conn", None)
        if active is not None:
            yield active
            return

        if self._shared_conn is not None:
            with self._write_lock:
                yield self._shared_conn
            return

        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Serialized write scope; all-or-nothing"""
        active = getattr(self._local, "conn", None)
        if active is not None:
            if getattr(self._local, "read_only", False):
                raise DatabaseError("Cannot write inside a read snapshot", "READ_ONLY")
            with self._savepoint(active) as conn:
                yield conn
            return

        with self._write_lock:
            conn = self._shared_conn or self._connect()
            self._local.conn = conn
            self._local.read_only = False
            self._local.depth = 0
            try:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    yield conn
                except BaseException:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK")
                    logger.debug("Transaction rolled back")
                    raise
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise self._wrap_error(e) from e
            finally:
                self._local.conn = None
                if conn is not self._shared_conn:
                    conn.close()

    @contextmanager
    def _savepoint(self, conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
        self._local.depth = getattr(self._local, "depth", 0) + 1
        name = f"sp_{self._local.depth}"
        conn.execute(f"SAVEPOINT {name}")
        try:
            yield conn
        except BaseException:
            conn.execute(f"ROLLBACK TO {name}")
            conn.execute(f"RELEASE {name}")
            raise
        else:
            conn.execute(f"RELEASE {name}")
        finally:
            self._local.depth -= 1

    @contextmanager
    def read_snapshot(self) -> Iterator[sqlite3.Connection]:
        """Consistent read scope: every query inside sees the same committed state"""
        active = getattr(self._local, "conn", None)
        if active is not None:
            yield active
            return

        with self.get_connection() as conn:
            self._local.conn = conn
            self._local.read_only = True
            try:
                conn.execute("BEGIN")
                try:
                    yield conn
                finally:
                    if conn.in_transaction:
                        conn.execute("COMMIT")
            except sqlite3.Error as e:
                raise self._wrap_error(e) from e
            finally:
                self._local.conn = None
                self._local.read_only = False

    def run_transaction(self, fn: Callable[[], T]) -> T:
        """Run a function within a database transaction"""
        with self.transaction():
            return fn()

    @staticmethod
    def _wrap_error(e: sqlite3.Error) -> DatabaseError:
        if isinstance(e, sqlite3.IntegrityError):
            return DatabaseError(f"Constraint violation: {e}", "CONSTRAINT", e)
        return DatabaseError(f"Database operation failed: {e}", "DATABASE_ERROR", e)

    # ==================== Generic execution ====================

    def execute_query(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        """Execute query and return results"""
        try:
            with self.get_connection() as conn:
                rows = conn.execute(query, params).fetchall()
                return [dict(row) for row in rows]
        except sqlite3.Error as e:
            raise self._wrap_error(e) from e

    def execute_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        """Execute query and return the first row, if any"""
        results = self.execute_query(query, params)
        return results[0] if results else None

    def execute_insert(self, query: str, params: Tuple = ()) -> int:
        """Execute insert operation and return inserted ID"""
        with self.transaction() as conn:
            cursor = self._execute(conn, query, params)
            return cursor.lastrowid or 0

    def execute_update(self, query: str, params: Tuple = ()) -> int:
        """Execute update operation and return affected row count"""
        with self.transaction() as conn:
            return self._execute(conn, query, params).rowcount

    def execute_delete(self, query: str, params: Tuple = ()) -> int:
        """Execute delete operation and return affected row count"""
        with self.transaction() as conn:
            return self._execute(conn, query, params).rowcount

    def _execute(self, conn: sqlite3.Connection, query: str, params: Tuple) -> sqlite3.Cursor:
        try:
            return conn.execute(query, params)
        except sqlite3.Error as e:
            raise self._wrap_error(e) from e

    # ==================== Validation helpers ====================

    @staticmethod
    def _validate_date(value: Optional[str], field_name: str) -> None:
        if not value:
            raise ValidationError(f"{field_name} is required")
        if not isinstance(value, str) or not _DATE_RE.match(value):
            raise ValidationError(
                f"{field_name} must be in ISO 8601 format (YYYY-MM-DD), got: {value}"
            )

    @staticmethod
    def _validate_text(
        text: Optional[str], field_name: str, max_length: int, required: bool = True
    ) -> None:
        if text is None or text == "":
            if required:
                raise ValidationError(f"{field_name} is required")
            return
        if not isinstance(text, str):
            raise ValidationError(f"{field_name} must be a string")
        if len(text) > max_length:
            raise ValidationError(
                f"{field_name} exceeds maximum length of {max_length} characters (got {len(text)})"
            )

    @staticmethod
    def _validate_priority(priority: Any) -> int:
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise ValidationError(f"Todo priority must be an integer, got: {priority!r}")
        if priority not in (1, 2, 3):
            raise ValidationError(f"Todo priority must be 1, 2 or 3, got: {priority}")
        return int(priority)

    @staticmethod
    def _validate_enum(enum_cls, value: Any, field_name: str):
        try:
            return enum_cls(value)
        except ValueError as e:
            allowed = ", ".join(member.value for member in enum_cls)
            raise ValidationError(
                f"{field_name} must be one of {allowed}, got: {value!r}"
            ) from e

    def _validate_log_exists(self, log_id: int) -> None:
        if self.get_log_by_id(log_id) is None:
            raise ValidationError(f"Log with id {log_id} does not exist")

    # ==================== Log operations ====================

    def create_log(
        self,
        date: Union[str, date_type],
        audio_path: Optional[str] = None,
        transcript: Optional[str] = None,
        summary: Optional[str] = None,
        pending_analysis: bool = False,
    ) -> Log:
        """Create log"""
        date = _date_str(date)
        self._validate_date(date, "Log date")
        self._validate_text(transcript, "Transcript", self.limits.transcript, required=False)
        self._validate_text(summary, "Summary", self.limits.summary, required=False)

        with self.transaction():
            log_id = self.execute_insert(
                queries.INSERT_LOG,
                (date, audio_path, transcript, summary, 1 if pending_analysis else 0),
            )
            return self._require_log(log_id)

    def get_log_by_id(self, log_id: int) -> Optional[Log]:
        """Get log by ID"""
        row = self.execute_one(queries.SELECT_LOG_BY_ID, (log_id,))
        return Log.model_validate(row) if row else None

    def get_all_logs(
        self, limit: int = defaults.DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> List[Log]:
        """Get logs, newest first"""
        rows = self.execute_query(queries.SELECT_LOGS, (limit, offset))
        return [Log.model_validate(row) for row in rows]

    def get_logs_by_date_range(
        self, start: Union[str, date_type], end: Union[str, date_type]
    ) -> List[Log]:
        """Get logs within a date range (inclusive)"""
        start, end = _date_str(start), _date_str(end)
        self._validate_date(start, "Start date")
        self._validate_date(end, "End date")
        rows = self.execute_query(queries.SELECT_LOGS_BY_DATE_RANGE, (start, end))
        return [Log.model_validate(row) for row in rows]

    def count_logs(self) -> int:
        row = self.execute_one(queries.SELECT_LOG_COUNT)
        return row["count"] if row else 0

    def update_log(self, log_id: int, **changes: Any) -> Log:
        """Update log (audio_path, transcript, summary)"""
        unknown = set(changes) - ALLOWED_LOG_UPDATE_COLUMNS
        if unknown:
            raise ValidationError(f"Invalid update field for log: {', '.join(sorted(unknown))}")

        if "transcript" in changes:
            self._validate_text(
                changes["transcript"], "Transcript", self.limits.transcript, required=False
            )
        if "summary" in changes:
            self._validate_text(
                changes["summary"], "Summary", self.limits.summary, required=False
            )

        with self.transaction():
            self._require_log(log_id)
            self._apply_update("logs", log_id, changes)
            return self._require_log(log_id)

    def delete_log(self, log_id: int) -> None:
        """Delete log; children are removed by ON DELETE CASCADE in the same statement"""
        if self.execute_delete(queries.DELETE_LOG, (log_id,)) == 0:
            raise NotFoundError("Log", log_id)
        logger.debug(f"Deleted log {log_id} with its segments")

    def _require_log(self, log_id: int) -> Log:
        log = self.get_log_by_id(log_id)
        if log is None:
            raise NotFoundError("Log", log_id)
        return log

    def _apply_update(self, table: str, row_id: int, changes: Dict[str, Any]) -> None:
        if not changes:
            return

        updates = [f"{column} = ?" for column in changes]
        params: List[Any] = list(changes.values())
        if table in ("logs", "todos", "ideas"):
            updates.append("updated_at = datetime('now')")
        params.append(row_id)

        # Column names come from the whitelists above, never from callers
        query = f"""
            UPDATE {table}
            SET {", ".join(updates)}
            WHERE id = ?
        """
        self.execute_update(query, tuple(params))

    # ==================== Pending analysis ====================

    def get_pending_logs(self) -> List[Log]:
        """Get all logs with pending_analysis set, oldest first"""
        rows = self.execute_query(queries.SELECT_PENDING_LOGS)
        return [Log.model_validate(row) for row in rows]

    def mark_log_as_pending(self, log_id: int, error_message: Optional[str] = None) -> Log:
        """Record a failed analysis: pending stays set, retry_count += 1"""
        with self.transaction():
            self._require_log(log_id)
            self.execute_update(queries.MARK_LOG_PENDING, (error_message, log_id))
            return self._require_log(log_id)

    def mark_log_as_analyzed(self, log_id: int) -> Log:
        """Clear pending_analysis and last_error"""
        with self.transaction():
            self._require_log(log_id)
            self.execute_update(queries.MARK_LOG_ANALYZED, (log_id,))
            return self._require_log(log_id)

    def reset_retry_count(self, log_id: int) -> Log:
        """Reset retry_count to zero"""
        with self.transaction():
            self._require_log(log_id)
            self.execute_update(queries.RESET_LOG_RETRY_COUNT, (log_id,))
            return self._require_log(log_id)

    # ==================== Todo operations ====================

    def create_todo(
        self,
        log_id: int,
        text: str,
        completed: bool = defaults.DEFAULT_TODO_COMPLETED,
        due_date: Optional[str] = None,
        priority: int = int(defaults.DEFAULT_PRIORITY),
        confidence: Optional[float] = None,
    ) -> Todo:
        """Create todo"""
        self._validate_text(text, "Todo text", self.limits.todo)
        if due_date:
            self._validate_date(due_date, "Todo due date")
        priority = self._validate_priority(priority)

        with self.transaction():
            self._validate_log_exists(log_id)
            todo_id = self.execute_insert(
                queries.INSERT_TODO,
                (log_id, text, 1 if completed else 0, due_date, priority, confidence),
            )
            return self._require_row(queries.SELECT_TODO_BY_ID, todo_id, Todo, "Todo")

    def get_todo_by_id(self, todo_id: int) -> Optional[Todo]:
        row = self.execute_one(queries.SELECT_TODO_BY_ID, (todo_id,))
        return Todo.model_validate(row) if row else None

    def get_todos_by_log_id(self, log_id: int) -> List[Todo]:
        rows = self.execute_query(queries.SELECT_TODOS_BY_LOG_ID, (log_id,))
        return [Todo.model_validate(row) for row in rows]

    def get_all_todos(
        self,
        completed: Optional[bool] = None,
        limit: int = defaults.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> List[Todo]:
        """Get todos, most urgent first, optionally filtered by completion"""
        if completed is None:
            rows = self.execute_query(queries.SELECT_ALL_TODOS, (limit, offset))
        else:
            rows = self.execute_query(
                queries.SELECT_TODOS_BY_COMPLETED, (1 if completed else 0, limit, offset)
            )
        return [Todo.model_validate(row) for row in rows]

    def update_todo(self, todo_id: int, **changes: Any) -> Todo:
        """Update todo (text, completed, due_date, priority)"""
        unknown = set(changes) - ALLOWED_TODO_UPDATE_COLUMNS
        if unknown:
            raise ValidationError(f"Invalid update field for todo: {', '.join(sorted(unknown))}")

        if "text" in changes:
            self._validate_text(changes["text"], "Todo text", self.limits.todo)
        if changes.get("due_date"):
            self._validate_date(changes["due_date"], "Todo due date")
        if "priority" in changes:
            changes["priority"] = self._validate_priority(changes["priority"])
        if "completed" in changes:
            changes["completed"] = 1 if changes["completed"] else 0

        with self.transaction():
            self._require_row(queries.SELECT_TODO_BY_ID, todo_id, Todo, "Todo")
            self._apply_update("todos", todo_id, changes)
            return self._require_row(queries.SELECT_TODO_BY_ID, todo_id, Todo, "Todo")

    def delete_todo(self, todo_id: int) -> None:
        if self.execute_delete(queries.DELETE_TODO, (todo_id,)) == 0:
            raise NotFoundError("Todo", todo_id)

    # ==================== Idea operations ====================

    def create_idea(
        self,
        log_id: int,
        text: str,
        status: Union[str, IdeaStatus] = defaults.DEFAULT_IDEA_STATUS,
        tags: Optional[Sequence[str]] = None,
    ) -> Idea:
        """Create idea"""
        self._validate_text(text, "Idea text", self.limits.idea)
        status = self._validate_enum(IdeaStatus, status, "Idea status")

        with self.transaction():
            self._validate_log_exists(log_id)
            idea_id = self.execute_insert(
                queries.INSERT_IDEA, (log_id, text, status.value, _dump_list(tags))
            )
            return self._require_idea(idea_id)

    def get_idea_by_id(self, idea_id: int) -> Optional[Idea]:
        row = self.execute_one(queries.SELECT_IDEA_BY_ID, (idea_id,))
        return self._row_to_idea(row) if row else None

    def get_ideas_by_log_id(self, log_id: int) -> List[Idea]:
        rows = self.execute_query(queries.SELECT_IDEAS_BY_LOG_ID, (log_id,))
        return [self._row_to_idea(row) for row in rows]

    def get_all_ideas(
        self,
        status: Optional[Union[str, IdeaStatus]] = None,
        limit: int = defaults.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> List[Idea]:
        """Get ideas, newest first, optionally filtered by status"""
        if status is None:
            rows = self.execute_query(queries.SELECT_ALL_IDEAS, (limit, offset))
        else:
            status = self._validate_enum(IdeaStatus, status, "Idea status")
            rows = self.execute_query(
                queries.SELECT_IDEAS_BY_STATUS, (status.value, limit, offset)
            )
        return [self._row_to_idea(row) for row in rows]

    def update_idea(self, idea_id: int, **changes: Any) -> Idea:
        """Update idea (text, status, tags)"""
        unknown = set(changes) - ALLOWED_IDEA_UPDATE_COLUMNS
        if unknown:
            raise ValidationError(f"Invalid update field for idea: {', '.join(sorted(unknown))}")

        if "text" in changes:
            self._validate_text(changes["text"], "Idea text", self.limits.idea)
        if "status" in changes:
            changes["status"] = self._validate_enum(
                IdeaStatus, changes["status"], "Idea status"
            ).value
        if "tags" in changes:
            changes["tags"] = _dump_list(changes["tags"])

        with self.transaction():
            self._require_idea(idea_id)
            self._apply_update("ideas", idea_id, changes)
            return self._require_idea(idea_id)

    def delete_idea(self, idea_id: int) -> None:
        if self.execute_delete(queries.DELETE_IDEA, (idea_id,)) == 0:
            raise NotFoundError("Idea", idea_id)

    def _require_idea(self, idea_id: int) -> Idea:
        idea = self.get_idea_by_id(idea_id)
        if idea is None:
            raise NotFoundError("Idea", idea_id)
        return idea

    @staticmethod
    def _row_to_idea(row: Dict[str, Any]) -> Idea:
        row = dict(row)
        row["tags"] = _load_list(row.get("tags"))
        return Idea.model_validate(row)

    # ==================== Learning operations ====================

    def create_learning(
        self, log_id: int, text: str, category: Optional[str] = None
    ) -> Learning:
        """Create learning"""
        self._validate_text(text, "Learning text", self.limits.learning)

        with self.transaction():
            self._validate_log_exists(log_id)
            learning_id = self.execute_insert(
                queries.INSERT_LEARNING, (log_id, text, category)
            )
            return self._require_row(
                queries.SELECT_LEARNING_BY_ID, learning_id, Learning, "Learning"
            )

    def get_learning_by_id(self, learning_id: int) -> Optional[Learning]:
        row = self.execute_one(queries.SELECT_LEARNING_BY_ID, (learning_id,))
        return Learning.model_validate(row) if row else None

    def get_learnings_by_log_id(self, log_id: int) -> List[Learning]:
        rows = self.execute_query(queries.SELECT_LEARNINGS_BY_LOG_ID, (log_id,))
        return [Learning.model_validate(row) for row in rows]

    def get_all_learnings(self) -> List[Learning]:
        rows = self.execute_query(queries.SELECT_ALL_LEARNINGS)
        return [Learning.model_validate(row) for row in rows]

    def delete_learning(self, learning_id: int) -> None:
        if self.execute_delete(queries.DELETE_LEARNING, (learning_id,)) == 0:
            raise NotFoundError("Learning", learning_id)

    # ==================== Accomplishment operations ====================

    def create_accomplishment(
        self,
        log_id: int,
        text: str,
        impact: Union[str, AccomplishmentImpact] = defaults.DEFAULT_IMPACT,
    ) -> Accomplishment:
        """Create accomplishment"""
        self._validate_text(text, "Accomplishment text", self.limits.accomplishment)
        impact = self._validate_enum(AccomplishmentImpact, impact, "Accomplishment impact")

        with self.transaction():
            self._validate_log_exists(log_id)
            accomplishment_id = self.execute_insert(
                queries.INSERT_ACCOMPLISHMENT, (log_id, text, impact.value)
            )
            return self._require_row(
                queries.SELECT_ACCOMPLISHMENT_BY_ID,
                accomplishment_id,
                Accomplishment,
                "Accomplishment",
            )

    def get_accomplishment_by_id(self, accomplishment_id: int) -> Optional[Accomplishment]:
        row = self.execute_one(queries.SELECT_ACCOMPLISHMENT_BY_ID, (accomplishment_id,))
        return Accomplishment.model_validate(row) if row else None

    def get_accomplishments_by_log_id(self, log_id: int) -> List[Accomplishment]:
        rows = self.execute_query(queries.SELECT_ACCOMPLISHMENTS_BY_LOG_ID, (log_id,))
        return [Accomplishment.model_validate(row) for row in rows]

    def get_all_accomplishments(self) -> List[Accomplishment]:
        rows = self.execute_query(queries.SELECT_ALL_ACCOMPLISHMENTS)
        return [Accomplishment.model_validate(row) for row in rows]

    def delete_accomplishment(self, accomplishment_id: int) -> None:
        if self.execute_delete(queries.DELETE_ACCOMPLISHMENT, (accomplishment_id,)) == 0:
            raise NotFoundError("Accomplishment", accomplishment_id)

    def _require_row(self, query: str, row_id: int, model, entity: str):
        row = self.execute_one(query, (row_id,))
        if row is None:
            raise NotFoundError(entity, row_id)
        return model.model_validate(row)

    # ==================== Summary operations ====================

    def create_summary(
        self,
        week_start: Union[str, date_type],
        week_end: Union[str, date_type],
        content: str,
        highlights: Optional[Sequence[str]] = None,
    ) -> Summary:
        """Create weekly summary"""
        week_start, week_end = _date_str(week_start), _date_str(week_end)
        self._validate_date(week_start, "Week start date")
        self._validate_date(week_end, "Week end date")
        self._validate_text(content, "Summary content", self.limits.summary)

        with self.transaction():
            summary_id = self.execute_insert(
                queries.INSERT_SUMMARY,
                (week_start, week_end, content, _dump_list(highlights)),
            )
            row = self.execute_one(queries.SELECT_SUMMARY_BY_ID, (summary_id,))
            return self._row_to_summary(row)

    def get_summary_by_week(self, week_start: Union[str, date_type]) -> Optional[Summary]:
        row = self.execute_one(queries.SELECT_SUMMARY_BY_WEEK, (_date_str(week_start),))
        return self._row_to_summary(row) if row else None

    def get_all_summaries(self) -> List[Summary]:
        rows = self.execute_query(queries.SELECT_ALL_SUMMARIES)
        return [self._row_to_summary(row) for row in rows]

    def delete_summary(self, summary_id: int) -> None:
        if self.execute_delete(queries.DELETE_SUMMARY, (summary_id,)) == 0:
            raise NotFoundError("Summary", summary_id)

    @staticmethod
    def _row_to_summary(row: Dict[str, Any]) -> Summary:
        row = dict(row)
        row["highlights"] = _load_list(row.get("highlights"))
        return Summary.model_validate(row)

    # ==================== Composite reads ====================

    def get_log_with_segments(self, log_id: int) -> Optional[LogWithSegments]:
        """Get a log with all four child collections, or None if it does not exist"""
        with self.read_snapshot():
            log = self.get_log_by_id(log_id)
            if log is None:
                return None

            return LogWithSegments(
                **log.model_dump(by_alias=False),
                todos=self.get_todos_by_log_id(log_id),
                ideas=self.get_ideas_by_log_id(log_id),
                learnings=self.get_learnings_by_log_id(log_id),
                accomplishments=self.get_accomplishments_by_log_id(log_id),
            )


# Global database manager instance
db_manager: Optional[DatabaseManager] = None


def get_db() -> DatabaseManager:
    """Get database manager instance

    Read database path from database.path in config.toml,
    use <data dir>/thoughtlog.db if not configured
    """
    global db_manager
    if db_manager is None:
        from thoughtlog.core.paths import get_db_path

        db_manager = DatabaseManager(str(get_db_path()), TextLimits.from_config())
        logger.info(f"Database manager initialized, path: {db_manager.db_path}")

    return db_manager


def switch_database(new_db_path: str) -> DatabaseManager:
    """Switch database to new path (for runtime database location modification)

    Args:
        new_db_path: New database path

    Returns:
        The active database manager
    """
    global db_manager

    if db_manager is not None and new_db_path != MEMORY_DB:
        if db_manager.db_path != MEMORY_DB and (
            Path(db_manager.db_path).resolve() == Path(new_db_path).resolve()
        ):
            logger.info(f"New path is same as current path, no switch needed: {new_db_path}")
            return db_manager

    close_db()
    db_manager = DatabaseManager(new_db_path, TextLimits.from_config())
    logger.info(f"Database switched to: {new_db_path}")
    return db_manager


def close_db() -> None:
    """Close and clear the global database manager"""
    global db_manager
    if db_manager is not None:
        db_manager.close()
        db_manager = None
