"""JSON logging configuration for ersha-certs."""

import logging

from pythonjsonlogger.json import JsonFormatter

LOGGER_NAME = "ersha_certs"

ALLOWED_FIELDS = frozenset(
    {"timestamp", "level", "logger", "message", "exc_info", "funcName", "lineno"}
)


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter with a fixed field set.

    Pipeline modules log through ``ersha_certs.lib.*`` child loggers; their
    name is kept as ``logger`` so each line shows which stage emitted it.
    """

    def add_fields(self, log_record, record, message_dict):
        """Rename levelname/name and drop every field outside ALLOWED_FIELDS.

        Args:
            log_record: Dict to be logged as JSON
            record: LogRecord object from logging framework
            message_dict: Dict containing message and args
        """
        super().add_fields(log_record, record, message_dict)

        log_record["level"] = log_record.pop("levelname", record.levelname)
        log_record["logger"] = log_record.pop("name", record.name)

        for key in [key for key in log_record if key not in ALLOWED_FIELDS]:
            log_record.pop(key)


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach the JSON handler to the package logger and set its level.

    Safe to call repeatedly; the JSON handler is only added once, whatever
    other handlers are attached.

    Args:
        level: Logging level name or number

    Returns:
        The ``ersha_certs`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)

    if not any(isinstance(h.formatter, CustomJsonFormatter) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(
            CustomJsonFormatter(
                fmt="%(timestamp)s %(levelname)s %(name)s %(funcName)s %(lineno)d %(message)s",
                timestamp=True,
            )
        )
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger


LOGGER = configure_logging()
