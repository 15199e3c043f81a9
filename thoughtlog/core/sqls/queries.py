"""
Database query SQL statements
Contains all SELECT, INSERT, UPDATE, DELETE statements
"""

# Pragmas
PRAGMA_FOREIGN_KEYS_ON = "PRAGMA foreign_keys = ON"
PRAGMA_JOURNAL_MODE_WAL = "PRAGMA journal_mode = WAL"

# Schema version queries
SELECT_SCHEMA_VERSION = """
    SELECT MAX(version) AS version FROM schema_version
"""

INSERT_SCHEMA_VERSION = """
    INSERT OR IGNORE INTO schema_version (version) VALUES (?)
"""

# Logs queries
INSERT_LOG = """
    INSERT INTO logs (date, audio_path, transcript, summary, pending_analysis)
    VALUES (?, ?, ?, ?, ?)
"""

SELECT_LOG_BY_ID = """
    SELECT * FROM logs WHERE id = ?
"""

SELECT_LOGS = """
    SELECT * FROM logs
    ORDER BY date DESC, id DESC
    LIMIT ? OFFSET ?
"""

SELECT_LOGS_BY_DATE_RANGE = """
    SELECT * FROM logs
    WHERE date >= ? AND date <= ?
    ORDER BY date ASC, id ASC
"""

SELECT_PENDING_LOGS = """
    SELECT * FROM logs
    WHERE pending_analysis = 1
    ORDER BY created_at ASC, id ASC
"""

SELECT_LOG_COUNT = """
    SELECT COUNT(*) AS count FROM logs
"""

DELETE_LOG = """
    DELETE FROM logs WHERE id = ?
"""

MARK_LOG_PENDING = """
    UPDATE logs
    SET pending_analysis = 1,
        retry_count = retry_count + 1,
        last_error = ?,
        updated_at = datetime('now')
    WHERE id = ?
"""

MARK_LOG_ANALYZED = """
    UPDATE logs
    SET pending_analysis = 0,
        last_error = NULL,
        updated_at = datetime('now')
    WHERE id = ?
"""

RESET_LOG_RETRY_COUNT = """
    UPDATE logs
    SET retry_count = 0,
        updated_at = datetime('now')
    WHERE id = ?
"""

# Todos queries
INSERT_TODO = """
    INSERT INTO todos (log_id, text, completed, due_date, priority, confidence)
    VALUES (?, ?, ?, ?, ?, ?)
"""

SELECT_TODO_BY_ID = """
    SELECT * FROM todos WHERE id = ?
"""

SELECT_TODOS_BY_LOG_ID = """
    SELECT * FROM todos WHERE log_id = ? ORDER BY id ASC
"""

SELECT_ALL_TODOS = """
    SELECT * FROM todos
    ORDER BY priority ASC, due_date IS NULL, due_date ASC, id ASC
    LIMIT ? OFFSET ?
"""

SELECT_TODOS_BY_COMPLETED = """
    SELECT * FROM todos
    WHERE completed = ?
    ORDER BY priority ASC, due_date IS NULL, due_date ASC, id ASC
    LIMIT ? OFFSET ?
"""

DELETE_TODO = """
    DELETE FROM todos WHERE id = ?
"""

# Ideas queries
INSERT_IDEA = """
    INSERT INTO ideas (log_id, text, status, tags)
    VALUES (?, ?, ?, ?)
"""

SELECT_IDEA_BY_ID = """
    SELECT * FROM ideas WHERE id = ?
"""

SELECT_IDEAS_BY_LOG_ID = """
    SELECT * FROM ideas WHERE log_id = ? ORDER BY id ASC
"""

SELECT_ALL_IDEAS = """
    SELECT * FROM ideas
    ORDER BY created_at DESC, id DESC
    LIMIT ? OFFSET ?
"""

SELECT_IDEAS_BY_STATUS = """
    SELECT * FROM ideas
    WHERE status = ?
    ORDER BY created_at DESC, id DESC
    LIMIT ? OFFSET ?
"""

DELETE_IDEA = """
    DELETE FROM ideas WHERE id = ?
"""

# Learnings queries
INSERT_LEARNING = """
    INSERT INTO learnings (log_id, text, category)
    VALUES (?, ?, ?)
"""

SELECT_LEARNING_BY_ID = """
    SELECT * FROM learnings WHERE id = ?
"""

SELECT_LEARNINGS_BY_LOG_ID = """
    SELECT * FROM learnings WHERE log_id = ? ORDER BY id ASC
"""

SELECT_ALL_LEARNINGS = """
    SELECT * FROM learnings ORDER BY created_at DESC, id DESC
"""

DELETE_LEARNING = """
    DELETE FROM learnings WHERE id = ?
"""

# Accomplishments queries
INSERT_ACCOMPLISHMENT = """
    INSERT INTO accomplishments (log_id, text, impact)
    VALUES (?, ?, ?)
"""

SELECT_ACCOMPLISHMENT_BY_ID = """
    SELECT * FROM accomplishments WHERE id = ?
"""

SELECT_ACCOMPLISHMENTS_BY_LOG_ID = """
    SELECT * FROM accomplishments WHERE log_id = ? ORDER BY id ASC
"""

SELECT_ALL_ACCOMPLISHMENTS = """
    SELECT * FROM accomplishments ORDER BY created_at DESC, id DESC
"""

DELETE_ACCOMPLISHMENT = """
    DELETE FROM accomplishments WHERE id = ?
"""

# Summaries queries
INSERT_SUMMARY = """
    INSERT INTO summaries (week_start, week_end, content, highlights)
    VALUES (?, ?, ?, ?)
"""

SELECT_SUMMARY_BY_ID = """
    SELECT * FROM summaries WHERE id = ?
"""

SELECT_SUMMARY_BY_WEEK = """
    SELECT * FROM summaries WHERE week_start = ?
"""

SELECT_ALL_SUMMARIES = """
    SELECT * FROM summaries ORDER BY week_start DESC
"""

DELETE_SUMMARY = """
    DELETE FROM summaries WHERE id = ?
"""
