import logging
from logging.config import dictConfig
from typing import Literal

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Third-party loggers that are chatty at INFO while fonts and documents are built.
QUIET_LOGGERS = ("PIL", "fontTools", "pdfminer", "multipart")


def configure_logging(level: LogLevel = "INFO", json_output: bool = True) -> None:
    """Route every logger to one console handler.

    The API logs JSON lines (python-json-logger) so ``extra=`` fields such as
    ``fiscal_year`` and ``file_name`` stay queryable; CLI scripts pass
    ``json_output=False`` for readable text.
    """
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "text": {"format": TEXT_FORMAT},
                "json": {"()": "pythonjsonlogger.json.JsonFormatter", "fmt": JSON_FIELDS},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if json_output else "text",
                }
            },
            "root": {"handlers": ["console"], "level": level.upper()},
            "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        }
    )

    # uvicorn installs its own handlers; let records propagate to ours instead.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers = []
