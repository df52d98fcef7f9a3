"""
Logging setup for blobshell, driven by the [logging] config section.

Log records go to stderr or to a file, never to stdout: stdout carries
command output such as listings and raw blob payloads.

    [logging]
    level = "INFO"                 # root level, WARNING when omitted
    console = true                 # log to stderr
    console-level = "DEBUG"
    file = "logs/blobshell.log"
    file-level = "INFO"

    [logging.logger."blobshell.services.blobstore.backends.s3"]
    level = "DEBUG"
"""
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers, kept at WARNING unless configured otherwise
NOISY_LOGGERS = ["boto3", "botocore", "s3transfer", "urllib3", "httpx", "httpcore"]


def parseLevel(levelStr: str, default: Optional[int] = None) -> Optional[int]:
    """Get log level by name, or default if the name is not a level."""
    level = getattr(logging, levelStr.upper(), None)
    if not isinstance(level, int):
        logger.error(f"Invalid log level '{levelStr}'")
        return default
    return level


def _buildHandler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _handlerLevel(config: Dict[str, Any], key: str, default: int) -> int:
    if key not in config:
        return default
    level = parseLevel(config[key], default)
    return default if level is None else level


def _openLogFile(logFile: str) -> logging.FileHandler:
    Path(logFile).parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(logFile, encoding="utf-8")


def configureLogger(localLogger: logging.Logger, config: Dict[str, Any]) -> None:
    """
    Apply one logging table to a logger, replacing its handlers.

    A file that cannot be opened is reported and skipped, the console
    handler is still installed.
    """
    if "level" in config:
        level = parseLevel(config["level"])
        if level is not None:
            localLogger.setLevel(level)
    baseLevel = localLogger.getEffectiveLevel()
    formatter = logging.Formatter(config.get("format", DEFAULT_FORMAT))

    handlers = []
    if config.get("console", False):
        consoleLevel = _handlerLevel(config, "console-level", baseLevel)
        handlers.append(_buildHandler(logging.StreamHandler(sys.stderr), consoleLevel, formatter))

    if "file" in config:
        fileLevel = _handlerLevel(config, "file-level", baseLevel)
        try:
            handlers.append(_buildHandler(_openLogFile(config["file"]), fileLevel, formatter))
        except OSError as e:
            logger.error(f"Failed to open log file {config['file']} for {localLogger.name}: {e}")

    for handler in localLogger.handlers[:]:
        localLogger.removeHandler(handler)
    for handler in handlers:
        localLogger.addHandler(handler)


def initLogging(config: Dict[str, Any]) -> None:
    """Configure the root logger and every [logging.logger.<name>] table."""
    rootLogger = logging.getLogger()
    rootLogger.setLevel(logging.WARNING)
    configureLogger(rootLogger, config)

    rootLevel = rootLogger.getEffectiveLevel()
    if rootLevel < logging.WARNING:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    for loggerName, loggerConfig in config.get("logger", {}).items():
        configureLogger(logging.getLogger(loggerName), loggerConfig)

    logger.debug(f"Logging configured, root level {logging.getLevelName(rootLevel)}")
