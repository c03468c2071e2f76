"""Logger to be used by the listener and its connection handlers."""
import logging
import sys
from pathlib import Path
from typing import Optional

__version__ = "0.1.0"

TRACE = 5
OFF = logging.CRITICAL + 10
logging.addLevelName(TRACE, "TRACE")

LEVELS = {
    'off': OFF,
    'error': logging.ERROR,
    'warn': logging.WARNING,
    'info': logging.INFO,
    'debug': logging.DEBUG,
    'trace': TRACE,
}


def parse_level(name: str) -> int:
    """Translate a level name from the command line into a logging level."""
    try:
        return LEVELS[name.lower()]
    except KeyError:
        raise ValueError(f"invalid log level: {name}") from None


def get_logger(name: str, level: str = 'info',
               log_file: Optional[str] = None,
               propagate: bool = False) -> logging.Logger:
    logFormatter = logging.Formatter(
        "%(asctime)s - %(name)s[%(process)d]: %(levelname)s - %(message)s")
    logger = logging.getLogger(name)
    logger.setLevel(parse_level(level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    consoleHandler = logging.StreamHandler(sys.stderr)
    consoleHandler.setFormatter(logFormatter)
    logger.addHandler(consoleHandler)

    if log_file:
        file_path = Path(log_file)
        if not file_path.parent.exists():
            file_path.parent.mkdir(parents=True)
        fileHandler = logging.FileHandler(file_path, 'w')
        fileHandler.setFormatter(logFormatter)
        logger.addHandler(fileHandler)

    logger.propagate = propagate
    return logger
