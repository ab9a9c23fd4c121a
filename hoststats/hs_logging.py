"""
Logging for hoststats.

Adds the levels used to report collection progress (STATUS, RESULT) and the
extra verbosity levels, plus colored console formatters. Worker threads log
through the same logger, so the debug formatter includes the thread name.
"""

import datetime
import enum
import logging
import sys

CRITICAL = logging.CRITICAL
ERROR = logging.ERROR
RESULT = 35
WARNING = logging.WARNING   # 30
STATUS = 25
INFO = logging.INFO         # 20
VERBOSE = 19
VERBOSER = 18
DEBUG = logging.DEBUG       # 10
RIDICULOUS = 7

DEFAULT_STREAM_LOG_LEVEL = INFO
FILE_LOG_FORMAT = "%(asctime)s|%(levelname)s|%(threadName)s: %(message)s"

custom_levels = {
    'RESULT': RESULT,
    'STATUS': STATUS,
    'VERBOSE': VERBOSE,
    'VERBOSER': VERBOSER,
    'RIDICULOUS': RIDICULOUS,
}


class COLORS(enum.Enum):
    yellow = "\033[0;33m"
    green = "\033[0;32m"
    bred = "\033[1;31m"
    bblue = "\033[1;34m"
    bipurple = "\033[1;95m"
    normal = "\033[0m"


level_to_color_map = {
    CRITICAL: COLORS.bred,
    ERROR: COLORS.bred,
    RESULT: COLORS.green,
    WARNING: COLORS.yellow,
    STATUS: COLORS.bblue,
    RIDICULOUS: COLORS.bipurple,
}


def get_level_color(level):
    return level_to_color_map.get(level, COLORS.normal).value


def log_level_factory(level_num):
    def log_func(self, message, *args, **kwargs):
        if self.isEnabledFor(level_num):
            self._log(level_num, message, args, **kwargs)
    return log_func


class HostStatsLogger(logging.Logger):
    """Logger with one method per custom level (logger.status(), logger.result(), ...)."""

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=3):
        # Replaces Logger._log so findCaller() reports the caller of the
        # generated level methods instead of this module.
        fn, lno, func, sinfo = self.findCaller(stack_info, stacklevel)
        if exc_info:
            if isinstance(exc_info, BaseException):
                exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
            elif not isinstance(exc_info, tuple):
                exc_info = sys.exc_info()

        record = self.makeRecord(self.name, level, fn, lno, msg, args, exc_info, func, extra, sinfo)
        self.handle(record)


for custom_name, custom_num in custom_levels.items():
    logging.addLevelName(custom_num, custom_name)
    setattr(HostStatsLogger, custom_name.lower(), log_level_factory(custom_num))


class ColoredStandardFormatter(logging.Formatter):
    def _prefix(self, record):
        return record.levelname

    def format(self, record):
        timestamp = datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        return (f"{get_level_color(record.levelno)}{timestamp}|{self._prefix(record)}: "
                f"{record.getMessage()}{COLORS.normal.value}")


class ColoredDebugFormatter(ColoredStandardFormatter):
    def _prefix(self, record):
        return f"{record.levelname}:{record.threadName}:{record.module}:{record.lineno}"


def _console_handlers(_logger):
    return [h for h in _logger.handlers if not isinstance(h, logging.FileHandler)]


def setup_logging(name=__name__, stream_log_level=DEFAULT_STREAM_LOG_LEVEL):
    """Create a HostStatsLogger with a colored console handler.

    The logger itself passes everything; filtering happens per handler.
    """
    if isinstance(stream_log_level, str):
        stream_log_level = logging.getLevelName(stream_log_level.upper())

    _logger = HostStatsLogger(name)
    _logger.setLevel(RIDICULOUS)

    console = logging.StreamHandler()
    console.setFormatter(ColoredStandardFormatter())
    console.setLevel(stream_log_level)
    _logger.addHandler(console)

    return _logger


def apply_logging_options(_logger, args):
    """Apply --verbose, --debug, --stream-log-level and --log-file.

    --verbose and --debug only ever lower the console threshold; an explicit
    --stream-log-level wins over both.
    """
    if args is None:
        return

    for console in _console_handlers(_logger):
        if getattr(args, "verbose", False):
            console.setLevel(min(console.level, VERBOSE))
        if getattr(args, "debug", False):
            console.setFormatter(ColoredDebugFormatter())
            console.setLevel(min(console.level, DEBUG))
        if getattr(args, "stream_log_level", None):
            console.setLevel(args.stream_log_level.upper())

    if getattr(args, "log_file", None):
        file_handler = logging.FileHandler(args.log_file)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        file_handler.setLevel(DEBUG)
        _logger.addHandler(file_handler)
