"""
Logging setup for the CareerPrep API.

Everything logs under the ``careerprep.`` namespace; uvicorn shares the
console and file handlers so request lines and application lines interleave.
"""
import functools
import logging
import logging.config
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_NAMESPACE = "careerprep"

FORMATS = {
    "simple": "%(levelname)s - %(name)s - %(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)-36s | %(funcName)-22s:%(lineno)-4d | %(message)s",
}

# driver and HTTP client loggers that flood DEBUG output
QUIET_LOGGERS = ("urllib3", "pymongo", "motor", "httpx")

# ENVIRONMENT -> (level or None for LOG_LEVEL, write log files, format)
ENVIRONMENT_PROFILES = {
    "production": (None, True, "detailed"),
    "development": ("DEBUG", True, "detailed"),
    "testing": ("WARNING", False, "simple"),
}

ROTATE_BYTES = 10 * 1024 * 1024
ROTATE_BACKUPS = 5


def _rotating_file(path: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filename": str(path),
        "maxBytes": ROTATE_BYTES,
        "backupCount": ROTATE_BACKUPS,
        "encoding": "utf8",
    }


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    enable_console: bool = True,
    enable_file: bool = True,
    format_style: str = "detailed"
) -> None:
    """
    Apply the dictConfig for the API process

    Args:
        level: Root logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the dated log files (defaults to $LOG_DIR or ./logs)
        enable_console: Log to stdout
        enable_file: Write careerprep_<date>.log plus an errors-only file
        format_style: 'simple' or 'detailed' for the console
    """
    stamp = datetime.now().strftime('%Y%m%d')
    directory = Path(log_dir or os.getenv("LOG_DIR", "logs"))

    handlers: Dict[str, Dict[str, Any]] = {}
    if enable_console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": format_style if format_style in FORMATS else "detailed",
            "stream": "ext://sys.stdout",
        }
    if enable_file:
        directory.mkdir(parents=True, exist_ok=True)
        handlers["file"] = _rotating_file(directory / f"careerprep_{stamp}.log", level)
        handlers["error_file"] = _rotating_file(directory / f"careerprep_errors_{stamp}.log", "ERROR")

    server_handlers = [h for h in ("console", "file") if h in handlers]
    loggers: Dict[str, Dict[str, Any]] = {
        "": {"level": level, "handlers": list(handlers), "propagate": False},
        "uvicorn": {"level": "INFO", "handlers": server_handlers, "propagate": False},
        "uvicorn.access": {"level": "INFO", "handlers": server_handlers[:1], "propagate": False},
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING", "handlers": [], "propagate": True}

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            style: {"format": fmt, "datefmt": "%Y-%m-%d %H:%M:%S"} for style, fmt in FORMATS.items()
        },
        "handlers": handlers,
        "loggers": loggers,
    })

    logger = get_logger("logging")
    logger.info(f"Logging configured - Level: {level}, Console: {enable_console}, File: {enable_file}")
    if enable_file:
        logger.info(f"Log directory: {directory}")


def configure_for_environment() -> str:
    """Configure logging from ENVIRONMENT and LOG_LEVEL; returns the environment name"""
    environment = os.getenv("ENVIRONMENT", "development").lower()
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    level, enable_file, style = ENVIRONMENT_PROFILES.get(environment, (None, True, "detailed"))
    setup_logging(level=level or log_level, enable_file=enable_file, format_style=style)
    return environment


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the careerprep namespace

    Args:
        name: Logger name (usually __name__)
    """
    if name == ROOT_NAMESPACE or name.startswith(f"{ROOT_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_NAMESPACE}.{name}")


def log_function_call(func):
    """Debug-log entry and duration of a coroutine; failures are logged and re-raised"""
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        start = time.perf_counter()
        logger.debug(f"Entering {func.__name__} with args={len(args)}, kwargs={list(kwargs)}")
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error in {func.__name__} after {time.perf_counter() - start:.3f}s: {e}")
            raise
        logger.debug(f"Completed {func.__name__} in {time.perf_counter() - start:.3f}s")
        return result

    return wrapper


class PerformanceMonitor:
    """Times a block; warns when it runs past ``threshold_ms``"""

    def __init__(self, operation_name: str, logger: logging.Logger = None, threshold_ms: float = 1000):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.threshold_ms = threshold_ms
        self.start_time = None
        self.elapsed_ms = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"Starting {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000

        if exc_type is not None:
            self.logger.error(f"{self.operation_name} failed after {self.elapsed_ms:.2f}ms: {exc_val}")
        elif self.elapsed_ms > self.threshold_ms:
            self.logger.warning(f"{self.operation_name} took {self.elapsed_ms:.2f}ms (threshold {self.threshold_ms}ms)")
        else:
            self.logger.info(f"{self.operation_name} completed in {self.elapsed_ms:.2f}ms")
        return False
