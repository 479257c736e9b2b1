"""Logging configuration for the share-matching engine.

The library itself never configures handlers; scripts call ``setup_logging()``
once at startup and every module obtains its logger through ``get_logger``.
"""

import contextlib
import logging
import logging.handlers
import os
from pathlib import Path
import time

from dotenv import load_dotenv


class LogFileConfig:
    """Configuration class for log file management."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        load_dotenv()

        # File rotation settings
        self.max_file_size = self._parse_size(os.getenv("LOG_MAX_FILE_SIZE", "5MB"))
        self.backup_count = int(os.getenv("LOG_BACKUP_COUNT", "3"))
        self.rotation_type = os.getenv("LOG_ROTATION_TYPE", "size").lower()  # size, time

        # File organization
        self.log_dir = Path(os.getenv("LOG_DIR", "logs"))
        self.base_filename = os.getenv("LOG_BASE_FILENAME", "sharematch")

        # Cleanup
        self.auto_cleanup_days = int(os.getenv("LOG_AUTO_CLEANUP_DAYS", "30"))

    def _parse_size(self, size_str: str) -> int:
        """Parse size string like '10MB', '1GB' to bytes."""
        size_str = size_str.upper().strip()

        if size_str.endswith("KB"):
            return int(size_str[:-2]) * 1024
        if size_str.endswith("MB"):
            return int(size_str[:-2]) * 1024 * 1024
        if size_str.endswith("GB"):
            return int(size_str[:-2]) * 1024 * 1024 * 1024
        # Assume bytes
        return int(size_str)

    def get_log_file_path(self) -> Path:
        """Get the main log file path."""
        return self.log_dir / f"{self.base_filename}.log"

    def create_log_directory(self):
        """Create log directory structure."""
        self.log_dir.mkdir(parents=True, exist_ok=True)


class LogFileManager:
    """Manages log file rotation and cleanup."""

    def __init__(self, config: LogFileConfig):
        """Initialize with a LogFileConfig instance."""
        self.config = config

    def create_file_handler(self) -> logging.Handler:
        """Create appropriate file handler based on configuration."""
        self.config.create_log_directory()
        log_file_path = self.config.get_log_file_path()

        if self.config.rotation_type == "time":
            return logging.handlers.TimedRotatingFileHandler(
                log_file_path,
                when="midnight",
                backupCount=self.config.backup_count,
            )

        return logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=self.config.max_file_size,
            backupCount=self.config.backup_count,
        )

    def cleanup_old_logs(self):
        """Delete log files older than the configured retention period."""
        if self.config.auto_cleanup_days <= 0 or not self.config.log_dir.exists():
            return

        cutoff_time = time.time() - (self.config.auto_cleanup_days * 24 * 3600)

        for log_file in self.config.log_dir.glob("*.log.*"):
            with contextlib.suppress(OSError):
                if log_file.stat().st_mtime < cutoff_time:
                    log_file.unlink()


def setup_logging(config: LogFileConfig = None, level: str | None = None):
    """Set up logging configuration for a script run.

    Call this once at application startup.

    Args:
        config: Optional LogFileConfig for custom file management settings
        level: Console log level, overrides LOG_LEVEL / ENVIRONMENT
    """
    load_dotenv()

    if config is None:
        config = LogFileConfig()

    environment = os.getenv("ENVIRONMENT", "development").lower()
    log_level = (level or os.getenv("LOG_LEVEL", "")).upper()

    if log_level and hasattr(logging, log_level):
        console_level = getattr(logging, log_level)
    elif environment == "production":
        console_level = logging.WARNING
    else:
        console_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    # Console output is short; the file gets the full context
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)-8s | %(message)s"))

    file_manager = LogFileManager(config)
    file_handler = file_manager.create_file_handler()
    file_handler.setLevel(logging.DEBUG)  # Always capture all levels in file
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    file_manager.cleanup_old_logs()

    logger = logging.getLogger("sharematch.config")
    logger.debug(
        "Logging initialized - Environment: %s, Level: %s, Log file: %s",
        environment,
        logging.getLevelName(console_level),
        config.get_log_file_path(),
    )


def get_logger(name: str | None = None):
    """Get a logger for a module.

    Args:
        name: Logger name, typically __name__ from the calling module

    Returns:
        Logger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Something happened")
    """
    if name is None:
        name = "sharematch"
    elif callable(name):
        # Handle case where a function object is passed instead of string
        name = getattr(name, "__module__", "sharematch")
    elif not isinstance(name, str):
        name = str(name)

    if not name.startswith("sharematch"):
        # Ensure all loggers are under the 'sharematch' hierarchy
        name = f"sharematch.{name}" if name else "sharematch"

    return logging.getLogger(name)
