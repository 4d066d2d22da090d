import logging
import logging.config
import os
import time

_configured = False  # simple idempotency guard

# Loggers owned by this app; library loggers are configured separately
APP_LOGGERS = ("core", "excel_io", "app")


def setup_logging() -> None:
    """
    Configure logging for the order engine and its Flask app.

    Environment Variables:
        LOG_LEVEL: Root and console level (default: "INFO").
        LOG_LEVEL_APP: Level for the core/excel_io/app loggers (default: LOG_LEVEL).
        LOG_LEVEL_SKU: Level for SKU index and collision messages (default: LOG_LEVEL_APP).
        LOG_LEVEL_OPENPYXL: Level for openpyxl (default: "WARNING").
        LOG_LEVEL_WERKZEUG: Level for the Flask request log (default: "WARNING").
        LOG_USE_UTC: If "1"/"true"/"yes", use UTC timestamps (default: enabled).
        LOG_FILE: Optional path to enable a rotating file handler.

    Returns immediately on subsequent calls.
    """
    global _configured
    if _configured:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    app_level = os.getenv("LOG_LEVEL_APP", level).upper()
    use_utc = os.getenv("LOG_USE_UTC", "1").lower() in {"1", "true", "yes"}
    log_file = os.getenv("LOG_FILE")

    class _UTCFormatter(logging.Formatter):
        converter = time.gmtime

    formatter = {
        "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        "datefmt": "%Y-%m-%dT%H:%M:%S",
    }
    formatter_def = (
        {"()": _UTCFormatter, **formatter}
        if use_utc
        else {"()": "logging.Formatter", **formatter}
    )

    handlers = ["console"]
    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter_def},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            "": {"level": level, "handlers": handlers},  # root
            "core.sku": {"level": os.getenv("LOG_LEVEL_SKU", app_level).upper()},
            "openpyxl": {"level": os.getenv("LOG_LEVEL_OPENPYXL", "WARNING").upper()},
            "werkzeug": {"level": os.getenv("LOG_LEVEL_WERKZEUG", "WARNING").upper()},
        },
    }
    for name in APP_LOGGERS:
        config["loggers"][name] = {"level": app_level}

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "default",
            "filename": log_file,
            "maxBytes": 2 * 1024 * 1024,
            "backupCount": 2,
        }
        handlers.append("file")

    logging.config.dictConfig(config)
    _configured = True
