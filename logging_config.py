import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# attributes every LogRecord carries; anything else arrived through `extra=`
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class FieldsFormatter(logging.Formatter):
    """Appends the record's `extra` fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        fields = [
            f"{key}={value}"
            for key, value in sorted(vars(record).items())
            if key not in _RECORD_ATTRS and not key.startswith("_")
        ]
        if fields:
            msg = msg + " " + " ".join(fields)
        return msg


def configure_logging(level_name: str = "info") -> logging.Logger:
    """Configure the root logger once, from an entrypoint. Unknown levels fall back to INFO."""
    level = logging.getLevelName(level_name.strip().upper())
    if not isinstance(level, int):
        level = logging.INFO
    handler = logging.StreamHandler()
    handler.setFormatter(FieldsFormatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler])
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    return logging.getLogger("review_ranger")
