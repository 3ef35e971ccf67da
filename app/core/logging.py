import logging
import logging.config
from pathlib import Path
from app.core.config import settings

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "default",
            "stream": "ext://sys.stdout"
        }
    },
    "root": {
        "level": settings.LOG_LEVEL,
        "handlers": ["console"]
    },
    "loggers": {
        "app": {
            "level": settings.LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False
        },
        "uvicorn.access": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False
        }
    }
}

def _file_handler(filename: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": settings.LOG_LEVEL,
        "formatter": "default",
        "filename": filename,
        "maxBytes": 10485760,  # 10MB
        "backupCount": 5
    }

def configure_logging():
    config = dict(LOGGING_CONFIG)
    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        config["handlers"] = {**LOGGING_CONFIG["handlers"], "file": _file_handler(settings.LOG_FILE)}
        config["root"] = {**LOGGING_CONFIG["root"], "handlers": ["console", "file"]}
        config["loggers"] = {
            **LOGGING_CONFIG["loggers"],
            "app": {**LOGGING_CONFIG["loggers"]["app"], "handlers": ["console", "file"]},
        }
    logging.config.dictConfig(config)
