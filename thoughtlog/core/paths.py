"""
Path utility module
Resolves the data directory and database location
"""

from pathlib import Path

from thoughtlog.config.loader import get_config
from thoughtlog.core.logger import get_logger

logger = get_logger(__name__)


def get_data_dir() -> Path:
    """
    Get the data directory

    The directory holding the active configuration file doubles as the data
    directory, so a relocated config (THOUGHTLOG_CONFIG_FILE) relocates data too
    """
    data_dir = Path(get_config().config_file).expanduser().parent
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_db_path() -> Path:
    """
    Get the database path

    Uses database.path from configuration when set, otherwise
    <data dir>/thoughtlog.db
    """
    configured_path = get_config().get("database.path", "")
    if configured_path and str(configured_path).strip():
        db_path = Path(str(configured_path)).expanduser()
    else:
        db_path = get_data_dir() / "thoughtlog.db"

    logger.debug(f"Resolved database path: {db_path}")
    return db_path
