import logging


class MediaFilter(logging.Filter):
    """Keep attachment bytes and encoded tokens out of structured logs."""

    BLOCKED_KEYS = {"media", "blob", "token", "payload"}

    def filter(self, record: logging.LogRecord) -> bool:
        for key in self.BLOCKED_KEYS:
            if hasattr(record, key):
                setattr(record, key, "[REDACTED]")
        return True


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # logger filters do not see records propagated from child loggers
    media_filter = MediaFilter()
    for handler in logging.getLogger().handlers:
        if not any(isinstance(existing, MediaFilter) for existing in handler.filters):
            handler.addFilter(media_filter)
