"""
Unified logging system
Supports output to files and console based on configuration
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from thoughtlog.config.loader import get_config


class LoggerManager:
    """Log manager"""

    def __init__(self):
        self._loggers: dict = {}
        self._setup_root_logger()

    def _setup_root_logger(self):
        """Setup root logger"""
        config = get_config()

        log_level = config.get("logging.level", "INFO")
        logs_dir = config.get("logging.logs_dir", "")
        max_file_size = config.get("logging.max_file_size", "10MB")
        backup_count = config.get("logging.backup_count", 5)

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

        # Only drop handlers installed by a previous setup, leave foreign ones alone
        for handler in list(root_logger.handlers):
            if getattr(handler, "_thoughtlog", False):
                root_logger.removeHandler(handler)
                handler.close()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        self._install(root_logger, console_handler)

        if not logs_dir:
            return

        Path(logs_dir).mkdir(parents=True, exist_ok=True)

        file_format = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
        )

        file_handler = logging.handlers.RotatingFileHandler(
            Path(logs_dir) / "thoughtlog.log",
            maxBytes=self._parse_size(max_file_size),
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_format)
        self._install(root_logger, file_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            Path(logs_dir) / "error.log",
            maxBytes=self._parse_size(max_file_size),
            backupCount=backup_count,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_format)
        self._install(root_logger, error_handler)

    @staticmethod
    def _install(root_logger: logging.Logger, handler: logging.Handler) -> None:
        handler._thoughtlog = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)

    def _parse_size(self, size_str: str) -> int:
        """Parse file size string"""
        size_str = str(size_str).upper()
        if size_str.endswith("KB"):
            return int(size_str[:-2]) * 1024
        elif size_str.endswith("MB"):
            return int(size_str[:-2]) * 1024 * 1024
        elif size_str.endswith("GB"):
            return int(size_str[:-2]) * 1024 * 1024 * 1024
        else:
            return int(size_str)

    def get_logger(self, name: str) -> logging.Logger:
        """Get logger with specified name"""
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)
        return self._loggers[name]


# Global log manager instance (lazy initialization to avoid circular imports)
_logger_manager: Optional[LoggerManager] = None


def get_logger(name: str) -> logging.Logger:
    """Convenience function to get logger"""
    global _logger_manager

    if _logger_manager is None:
        _logger_manager = LoggerManager()

    return _logger_manager.get_logger(name)


def setup_logging():
    """Setup logging system (for initialization)"""
    global _logger_manager

    if _logger_manager is None:
        _logger_manager = LoggerManager()
    else:
        _logger_manager._setup_root_logger()
