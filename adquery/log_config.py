"""Настройка логирования.

Logs go to stderr so they never mix with report lines on stdout. When a log
directory is configured, a file handler rotating at midnight is added.

- Ротация: ежедневно (midnight).
- Хранение: retention_days файлов (по умолчанию 30).
- Уровень: level (по умолчанию INFO).
"""
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler

_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Отслеживаем установленные handlers, чтобы при реконфигурации удалять старые.
_file_handler: logging.Handler | None = None
_console_handler: logging.Handler | None = None


def setup_logging(
    level: str = "INFO",
    log_dir: str = "",
    retention_days: int = 30,
) -> None:
    """Настраивает корневой логгер.

    - Консольный handler: stderr.
    - Файловый handler (если задан log_dir): ротация по дате.
    """
    global _file_handler, _console_handler

    level_str = (level or "INFO").strip().upper()
    if level_str not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level_str = "INFO"
    log_level = getattr(logging, level_str, logging.INFO)

    retention_days = max(1, min(365, int(retention_days or 30)))

    root = logging.getLogger()

    # Удаляем предыдущие наши handlers (при реконфигурации)
    for handler in (_file_handler, _console_handler):
        if handler is not None and handler in root.handlers:
            root.removeHandler(handler)
            handler.close()
    _file_handler = None

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    _console_handler = ch
    root.addHandler(ch)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        fh = TimedRotatingFileHandler(
            os.path.join(log_dir, "adquery.log"),
            when="midnight",
            interval=1,
            backupCount=retention_days,
            encoding="utf-8",
            utc=True,
        )
        fh.suffix = "%Y-%m-%d"
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        _file_handler = fh
        root.addHandler(fh)

    root.setLevel(log_level)

    # Подавляем слишком шумные логгеры
    logging.getLogger("ldap3").setLevel(max(log_level, logging.WARNING))

    logging.getLogger("adquery").debug(
        "Logging configured: level=%s, dir=%s, retention=%d days",
        level_str, log_dir or "-", retention_days,
    )
