import logging
import sys

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"

# Client libraries that log every request or frame at INFO.
_QUIET_LOGGERS = ("pika", "httpx", "httpcore", "urllib3", "ddtrace")


def _json_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    return handler


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Routes every log record to stdout as one JSON object per line.

    ``level`` may be a number or a name such as ``"DEBUG"``. The root logger
    loses any handlers it already had. trace_id and span_id are filled in by
    ddtrace when tracing is active and are null otherwise.

    Returns:
        logging.Logger: The root logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [_json_handler()]

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return root_logger
