"""Project-wide logger: a rotating file under ``LOG_DIR`` plus the console."""
import inspect
import logging.handlers
import os
from pathlib import Path

LOGGER_NAME = "LichessDashboard"
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_FILE_NAME = "lichess_dashboard.log"
LOG_ROTATION = os.getenv("LOG_ROTATION", "midnight")
LOG_BACKUPS = int(os.getenv("LOG_BACKUPS", "5"))
LOG_FORMAT = "%(asctime)s - [%(levelname)s] - %(source)s.%(funcName)s(): %(message)s {%(lineno)d}"


def module_path(pathname: str) -> str:
    """``/srv/app/lichess_tracker/formatting.py`` -> ``lichess_tracker.formatting``."""
    parts = Path(pathname).with_suffix("").parts
    if "app" in parts:
        start = len(parts) - parts[::-1].index("app")
        parts = parts[start:]
    else:
        parts = parts[-1:]
    return ".".join(parts)


def calling_class(func_name: str) -> str | None:
    frame = inspect.currentframe()
    while frame:
        if frame.f_code.co_name == func_name:
            owner = frame.f_locals.get("self")
            if owner is not None:
                return type(owner).__name__
        frame = frame.f_back
    return None


class SourceFilter(logging.Filter):
    """Sets ``record.source`` to the module path, followed by the class when logged from a method."""

    def filter(self, record):
        source = module_path(record.pathname)
        owner = calling_class(record.funcName)
        record.source = f"{source}.{owner}" if owner else source
        return True


def configure_logger(name: str = LOGGER_NAME, log_dir: Path = LOG_DIR) -> logging.Logger:
    log = logging.getLogger(name)
    if log.handlers:
        return log

    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.TimedRotatingFileHandler(
        log_dir / LOG_FILE_NAME, when=LOG_ROTATION, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    console = logging.StreamHandler()
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in (file_handler, console):
        handler.setFormatter(formatter)
        log.addHandler(handler)

    log.setLevel(os.getenv("LOG_LEVEL", "DEBUG").upper())
    log.addFilter(SourceFilter())
    log.propagate = False
    return log


logger = configure_logger()
