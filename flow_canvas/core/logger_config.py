import logging.config
import sys

from flow_canvas.core.config import settings


def configure_logging(level: str = None):
    level = (level or settings.LOG_LEVEL).upper()
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,

        # Formatters: How the logs look
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
        },

        # Handlers: Where the logs go
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": sys.stdout,
            },
            "file": {
                "level": "ERROR",
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "filename": settings.LOG_FILE,
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5,
                "delay": True,  # file is only created on the first error
            },
        },

        # Loggers: The configuration for specific modules
        "loggers": {
            "": {  # The "root" logger (captures everything)
                "handlers": ["console", "file"],
                "level": level,
                "propagate": True
            },
            "flow_canvas.canvas": {  # pointer state machine is chatty on DEBUG
                "level": level,
                "propagate": True
            },
            "uvicorn.access": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False
            },
        }
    }

    logging.config.dictConfig(logging_config)
