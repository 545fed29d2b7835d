"""
Logging setup for the layout service.

Console output is always enabled. When a log directory is configured the
service also writes day-stamped files that roll over by size:
layout_2026-01-12.log, layout_2026-01-12_01.log, layout_2026-01-12_02.log
Errors are additionally collected in error_YYYY-MM-DD.log.
"""

import glob
import logging
import os
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from layout_sync.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class DailyRotatingFileHandler(RotatingFileHandler):
    """
    Rotating file handler that also starts a new file every day.

    - one file per day: <base_name>_2026-01-12.log
    - past max_bytes, rolls to <base_name>_2026-01-12_01.log, _02.log, ...
    - files older than backup_days are removed on startup
    """

    def __init__(
        self,
        log_dir: str,
        base_name: str = "layout",
        max_bytes: int = 50 * 1024 * 1024,
        backup_count: int = 10,
        backup_days: int = 30,
        encoding: str = "utf-8",
    ):
        self.log_dir = Path(log_dir)
        self.base_name = base_name
        self.backup_days = backup_days
        self._current_date: Optional[str] = None
        self._current_file: Optional[Path] = None

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._update_filename()

        super().__init__(
            filename=str(self._current_file),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding=encoding,
        )

        self._cleanup_old_logs()

    @staticmethod
    def _today() -> str:
        return datetime.now().strftime("%Y-%m-%d")

    def _update_filename(self) -> None:
        today = self._today()
        if self._current_date != today:
            self._current_date = today
            self._current_file = self.log_dir / f"{self.base_name}_{today}.log"

    def shouldRollover(self, record):
        if self._current_date != self._today():
            return True
        return super().shouldRollover(record)

    def doRollover(self):
        if self._current_date == self._today():
            # Size limit reached on the same day
            super().doRollover()
            return

        if self.stream:
            self.stream.close()
            self.stream = None
        self._update_filename()
        self.baseFilename = str(self._current_file)
        self.stream = self._open()

    def rotation_filename(self, default_name):
        """layout_2026-01-12.log.1 -> layout_2026-01-12_01.log"""
        if ".log." not in default_name:
            return default_name
        base, num = default_name.rsplit(".log.", 1)
        return f"{base}_{num.zfill(2)}.log"

    def _cleanup_old_logs(self) -> None:
        cutoff_date = datetime.now() - timedelta(days=self.backup_days)
        pattern = str(self.log_dir / f"{self.base_name}_*.log")

        for log_file in glob.glob(pattern):
            filename = os.path.basename(log_file)
            date_str = filename[len(self.base_name) + 1:].split(".log")[0].split("_")[0]
            try:
                file_date = datetime.strptime(date_str, "%Y-%m-%d")
            except ValueError:
                continue
            if file_date < cutoff_date:
                try:
                    os.remove(log_file)
                    logging.debug(f"Removed expired log file: {log_file}")
                except OSError as e:
                    logging.warning(f"Could not remove expired log file {log_file}: {e}")


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: Optional[str] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        log_dir: Directory for rotating log files. Falls back to LOG_DIR;
            when neither is set only the console handler is installed.
        log_level: Root level (DEBUG/INFO/WARNING/ERROR). Falls back to LOG_LEVEL.
    """
    settings = get_settings()
    log_dir = log_dir or settings.LOG_DIR
    log_level = (log_level or settings.LOG_LEVEL).upper()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Avoid duplicate handlers when the app factory runs more than once
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO)
    root_logger.addHandler(console_handler)

    if log_dir:
        app_handler = DailyRotatingFileHandler(
            log_dir=log_dir,
            base_name="layout",
            max_bytes=settings.LOG_MAX_BYTES,
            backup_count=settings.LOG_BACKUP_COUNT,
            backup_days=settings.LOG_BACKUP_DAYS,
        )
        app_handler.setFormatter(formatter)
        app_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(app_handler)

        error_handler = DailyRotatingFileHandler(
            log_dir=log_dir,
            base_name="error",
            max_bytes=settings.LOG_MAX_BYTES,
            backup_count=settings.LOG_BACKUP_COUNT,
            backup_days=settings.LOG_BACKUP_DAYS,
        )
        error_handler.setFormatter(formatter)
        error_handler.setLevel(logging.ERROR)
        root_logger.addHandler(error_handler)

    # Third-party noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    if log_dir:
        logging.info(f"Logging initialised, level={log_level}, dir={Path(log_dir).absolute()}")
    else:
        logging.info(f"Logging initialised, level={log_level}, console only")
