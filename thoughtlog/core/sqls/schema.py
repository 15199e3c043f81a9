"""
Database schema definitions
Contains all CREATE TABLE and CREATE INDEX statements
"""

SCHEMA_VERSION = 1

# Table creation statements
CREATE_LOGS_TABLE = """
    CREATE TABLE IF NOT EXISTS logs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        audio_path TEXT,
        transcript TEXT,
        summary TEXT,
        pending_analysis INTEGER NOT NULL DEFAULT 0,
        retry_count INTEGER NOT NULL DEFAULT 0,
        last_error TEXT,
        created_at TEXT DEFAULT (datetime('now')),
        updated_at TEXT DEFAULT (datetime('now'))
    )
"""

CREATE_TODOS_TABLE = """
    CREATE TABLE IF NOT EXISTS todos (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        log_id INTEGER NOT NULL,
        text TEXT NOT NULL,
        completed INTEGER NOT NULL DEFAULT 0,
        due_date TEXT,
        priority INTEGER NOT NULL DEFAULT 2 CHECK (priority BETWEEN 1 AND 3),
        confidence REAL,
        created_at TEXT DEFAULT (datetime('now')),
        updated_at TEXT DEFAULT (datetime('now')),
        FOREIGN KEY (log_id) REFERENCES logs(id) ON DELETE CASCADE
    )
"""

CREATE_IDEAS_TABLE = """
    CREATE TABLE IF NOT EXISTS ideas (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        log_id INTEGER NOT NULL,
        text TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'raw'
            CHECK (status IN ('raw', 'developing', 'actionable', 'archived')),
        tags TEXT,
        created_at TEXT DEFAULT (datetime('now')),
        updated_at TEXT DEFAULT (datetime('now')),
        FOREIGN KEY (log_id) REFERENCES logs(id) ON DELETE CASCADE
    )
"""

CREATE_LEARNINGS_TABLE = """
    CREATE TABLE IF NOT EXISTS learnings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        log_id INTEGER NOT NULL,
        text TEXT NOT NULL,
        category TEXT,
        created_at TEXT DEFAULT (datetime('now')),
        FOREIGN KEY (log_id) REFERENCES logs(id) ON DELETE CASCADE
    )
"""

CREATE_ACCOMPLISHMENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS accomplishments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        log_id INTEGER NOT NULL,
        text TEXT NOT NULL,
        impact TEXT NOT NULL DEFAULT 'medium'
            CHECK (impact IN ('low', 'medium', 'high')),
        created_at TEXT DEFAULT (datetime('now')),
        FOREIGN KEY (log_id) REFERENCES logs(id) ON DELETE CASCADE
    )
"""

CREATE_SUMMARIES_TABLE = """
    CREATE TABLE IF NOT EXISTS summaries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        week_start TEXT NOT NULL UNIQUE,
        week_end TEXT NOT NULL,
        content TEXT NOT NULL,
        highlights TEXT,
        generated_at TEXT DEFAULT (datetime('now'))
    )
"""

CREATE_SCHEMA_VERSION_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY,
        applied_at TEXT DEFAULT (datetime('now'))
    )
"""

# Index creation statements
CREATE_LOGS_DATE_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_logs_date ON logs(date)
"""

CREATE_LOGS_PENDING_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_logs_pending ON logs(pending_analysis)
"""

CREATE_TODOS_LOG_ID_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_todos_log_id ON todos(log_id)
"""

CREATE_TODOS_COMPLETED_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_todos_completed ON todos(completed)
"""

CREATE_TODOS_DUE_DATE_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_todos_due_date ON todos(due_date)
"""

CREATE_IDEAS_LOG_ID_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_ideas_log_id ON ideas(log_id)
"""

CREATE_IDEAS_STATUS_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_ideas_status ON ideas(status)
"""

CREATE_LEARNINGS_LOG_ID_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_learnings_log_id ON learnings(log_id)
"""

CREATE_ACCOMPLISHMENTS_LOG_ID_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_accomplishments_log_id ON accomplishments(log_id)
"""

CREATE_SUMMARIES_WEEK_START_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_summaries_week_start ON summaries(week_start)
"""

ALL_TABLES = [
    CREATE_LOGS_TABLE,
    CREATE_TODOS_TABLE,
    CREATE_IDEAS_TABLE,
    CREATE_LEARNINGS_TABLE,
    CREATE_ACCOMPLISHMENTS_TABLE,
    CREATE_SUMMARIES_TABLE,
    CREATE_SCHEMA_VERSION_TABLE,
]

ALL_INDEXES = [
    CREATE_LOGS_DATE_INDEX,
    CREATE_LOGS_PENDING_INDEX,
    CREATE_TODOS_LOG_ID_INDEX,
    CREATE_TODOS_COMPLETED_INDEX,
    CREATE_TODOS_DUE_DATE_INDEX,
    CREATE_IDEAS_LOG_ID_INDEX,
    CREATE_IDEAS_STATUS_INDEX,
    CREATE_LEARNINGS_LOG_ID_INDEX,
    CREATE_ACCOMPLISHMENTS_LOG_ID_INDEX,
    CREATE_SUMMARIES_WEEK_START_INDEX,
]

# Child tables owned by logs through log_id
CHILD_TABLES = ["todos", "ideas", "learnings", "accomplishments"]
