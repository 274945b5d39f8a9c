"""Console logging with JSON-formatted extras."""

import json
import logging
import sys

LINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else came in through `extra=`
_STANDARD_ATTRS = frozenset(logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


class JSONExtrasFormatter(logging.Formatter):
    """Readable log line with the record's `extra={...}` fields appended as JSON.

    Output format:
        2024-01-15 10:30:45 | INFO     | scraper | Content extracted {"url": "..."}
    """

    def __init__(self, fmt: str = LINE_FORMAT, datefmt: str = DATE_FORMAT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        extras = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS and not k.startswith("_")}
        if not extras:
            return line
        return f"{line} {json.dumps(extras, default=str, ensure_ascii=False)}"


def setup_logging(level: str = "INFO") -> None:
    """Attach a single console handler to the root logger."""
    root = logging.getLogger()
    root.setLevel(level)

    if any(getattr(h, "_geo_analyzer", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONExtrasFormatter())
    handler._geo_analyzer = True  # type: ignore[attr-defined]
    root.addHandler(handler)
