"""
Logging for prakasa-env.

Adds levels between the standard ones so the console can be tuned finely:

    RESULT (35)      final outcome lines
    STATUS (25)      progress the user should always see
    VERBOSE (19)     per-component detail, shown with --verbose
    VERBOSER (18)
    VERBOSEST (17)
    RIDICULOUS (7)   raw command output
    LUDICROUS (5)
    PLAID (3)

EnvLogger exposes one method per added level (``logger.status(...)``).
Console output is colored; log files get the same layout without escape
sequences.
"""

import logging

CRITICAL = logging.CRITICAL
ERROR = logging.ERROR
RESULT = 35
WARNING = logging.WARNING
STATUS = 25
INFO = logging.INFO
VERBOSE = 19
VERBOSER = 18
VERBOSEST = 17
DEBUG = logging.DEBUG
RIDICULOUS = 7
LUDICROUS = 5
PLAID = 3

CUSTOM_LEVELS = {
    'RESULT': RESULT,
    'STATUS': STATUS,
    'VERBOSE': VERBOSE,
    'VERBOSER': VERBOSER,
    'VERBOSEST': VERBOSEST,
    'RIDICULOUS': RIDICULOUS,
    'LUDICROUS': LUDICROUS,
    'PLAID': PLAID,
}

DEFAULT_STREAM_LOG_LEVEL = INFO

RESET = "\033[0m"
LEVEL_COLORS = {
    CRITICAL: "\033[1;31m",
    ERROR: "\033[1;31m",
    RESULT: "\033[0;32m",
    WARNING: "\033[0;33m",
    STATUS: "\033[1;34m",
    DEBUG: "\033[0;90m",
    RIDICULOUS: "\033[0;90m",
    LUDICROUS: "\033[0;90m",
    PLAID: "\033[0;35m",
}


def _level_method(level):
    def log_at_level(self, message, *args, **kwargs):
        if self.isEnabledFor(level):
            # Attribute the record to the caller, not to this wrapper
            kwargs.setdefault("stacklevel", 2)
            self.log(level, message, *args, **kwargs)
    return log_at_level


class EnvLogger(logging.Logger):
    """Logger with a method for each of the prakasa-env levels."""


for _name, _level in CUSTOM_LEVELS.items():
    logging.addLevelName(_level, _name)
    setattr(EnvLogger, _name.lower(), _level_method(_level))


class _EnvFormatter(logging.Formatter):
    detailed = False
    colored = False

    def format(self, record):
        prefix = f"{self.formatTime(record, '%Y-%m-%d %H:%M:%S')}|{record.levelname}"
        if self.detailed:
            prefix = f"{prefix}:{record.module}:{record.lineno}"
        text = f"{prefix}: {record.getMessage()}"
        if record.exc_info and self.detailed:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        if self.colored:
            color = LEVEL_COLORS.get(record.levelno, RESET)
            text = f"{color}{text}{RESET}"
        return text


class ColoredStandardFormatter(_EnvFormatter):
    colored = True


class ColoredDebugFormatter(_EnvFormatter):
    colored = True
    detailed = True


class PlainDebugFormatter(_EnvFormatter):
    """Debug layout without escape sequences, for log files."""
    detailed = True


def setup_logging(name=__name__, stream_log_level=DEFAULT_STREAM_LOG_LEVEL, log_file=None):
    """Create an EnvLogger writing to stderr at ``stream_log_level`` and, optionally, to ``log_file``."""
    if isinstance(stream_log_level, str):
        stream_log_level = logging.getLevelName(stream_log_level.upper())

    env_logger = EnvLogger(name)
    env_logger.setLevel(PLAID)

    console = logging.StreamHandler()
    console.setFormatter(ColoredStandardFormatter())
    console.setLevel(stream_log_level)
    env_logger.addHandler(console)

    if log_file:
        add_file_handler(env_logger, log_file)
    return env_logger


def add_file_handler(env_logger, log_file, level=DEBUG):
    """Attach a file handler that records everything at or above ``level``."""
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(PlainDebugFormatter())
    handler.setLevel(level)
    env_logger.addHandler(handler)
    return handler


def _is_file_handler(handler):
    return isinstance(handler, logging.FileHandler)


def apply_logging_options(env_logger, args):
    """
    Apply --verbose, --debug, --stream-log-level and --log-file.

    Only console handlers follow the flags. An explicit --stream-log-level
    is applied last and wins over --verbose and --debug.
    """
    if args is None:
        return
    consoles = [h for h in env_logger.handlers if not _is_file_handler(h)]

    lowest = None
    if getattr(args, "verbose", False):
        lowest = VERBOSE
    if getattr(args, "debug", False):
        lowest = DEBUG
        for handler in consoles:
            handler.setFormatter(ColoredDebugFormatter())
    if lowest is not None:
        for handler in consoles:
            handler.setLevel(min(handler.level, lowest))

    requested = getattr(args, "stream_log_level", None)
    if requested:
        for handler in consoles:
            handler.setLevel(requested.upper())

    log_file = getattr(args, "log_file", None)
    if log_file and not any(_is_file_handler(h) for h in env_logger.handlers):
        add_file_handler(env_logger, log_file)
