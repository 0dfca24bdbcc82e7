import logging
from typing import Optional

from tuplemr.utils.config import get_settings

# Level chosen by the running process through `setup_logger`; None defers to Settings
_process_log_level: Optional[str] = None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Retrieve a configured logger for the specified module.

    If no name is provided, the default logger name 'TupleMR' is used.
    Each logger is configured with:
    - A StreamHandler for console output
    - A standardized log format with timestamp, level, logger name, and message
    - The level passed to `setup_logger`, or `Settings.log_level` otherwise

    Args:
        name (Optional[str]): Name of the logger (usually the module name).

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(name or "TupleMR")
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(_level_from_name(_process_log_level or get_settings().log_level))
    return logger


def setup_logger(service: str = "TupleMR", log_level: Optional[str] = None) -> logging.Logger:
    """
    Initialize and configure the top-level logger of a TupleMR process.

    Typically called once during service or worker startup.

    Args:
        service (str): Human-readable name of the process being started.
        log_level (Optional[str]): Level for every TupleMR logger of this
            process, e.g. from `WorkerSettings.log_level`. Loggers created
            before this call are re-leveled too.

    Returns:
        logging.Logger: Global application logger.
    """
    global _process_log_level
    if log_level is not None:
        _process_log_level = log_level
        level = _level_from_name(log_level)
        for name, existing in list(logging.root.manager.loggerDict.items()):
            if isinstance(existing, logging.Logger) and (name == "TupleMR" or name.split(".")[0] == "tuplemr"):
                existing.setLevel(level)

    logger = get_logger()
    logger.info(f"{service} logger initialized")
    return logger


def _level_from_name(level_name: str) -> int:
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO
