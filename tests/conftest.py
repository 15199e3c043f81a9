"""
tests/conftest.py
Shared fixtures. The configuration file is redirected to a throwaway directory
before any thoughtlog module loads it.
"""

import os
import tempfile

_CONFIG_DIR = tempfile.mkdtemp(prefix="thoughtlog-tests-")
os.environ["THOUGHTLOG_CONFIG_FILE"] = os.path.join(_CONFIG_DIR, "config.toml")

import pytest  # noqa: E402

from thoughtlog.core.db import DatabaseManager, close_db, switch_database  # noqa: E402
from thoughtlog.core.sqls.schema import CHILD_TABLES  # noqa: E402
from thoughtlog.processing import storage as storage_module  # noqa: E402
from thoughtlog.processing.storage import StorageCoordinator  # noqa: E402


def count_rows(db: DatabaseManager) -> dict:
    """Row count of the parent table and every child table"""
    counts = {}
    for table in ["logs", *CHILD_TABLES]:
        row = db.execute_one(f"SELECT COUNT(*) AS count FROM {table}")
        counts[table] = row["count"]
    return counts


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager(str(tmp_path / "test.db"))
    yield manager
    manager.close()


@pytest.fixture
def memory_db():
    manager = DatabaseManager(":memory:")
    yield manager
    manager.close()


@pytest.fixture
def storage(db):
    return StorageCoordinator(db)


@pytest.fixture
def global_db(tmp_path):
    """Point the process-wide database (used by the API and CLI) at a fresh file"""
    storage_module._storage = None
    manager = switch_database(str(tmp_path / "global.db"))
    yield manager
    close_db()
    storage_module._storage = None
