import logging
import os

from .request_context import athlete_id_var, request_id_var


def _stamp(record: logging.LogRecord) -> logging.LogRecord:
    if not hasattr(record, "request_id"):
        record.request_id = request_id_var.get() or "-"
    if not hasattr(record, "athlete_id"):
        record.athlete_id = athlete_id_var.get() or "-"
    return record


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        record.athlete_id = athlete_id_var.get() or "-"
        return True


class SafeFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return super().format(_stamp(record))


LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s "
    "request_id=%(request_id)s athlete_id=%(athlete_id)s %(message)s"
)


def setup_logging() -> None:
    level = os.getenv("STATS_LOG_LEVEL", "INFO").upper()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    # Records created outside a request still need the context attributes.
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        return _stamp(old_factory(*args, **kwargs))

    logging.setLogRecordFactory(record_factory)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    formatter = SafeFormatter(LOG_FORMAT)
    for handler in root.handlers:
        handler.setFormatter(formatter)
        handler.addFilter(ContextFilter())
