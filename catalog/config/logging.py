import logging
import socket
from logging.config import dictConfig

from pythonjsonlogger.json import JsonFormatter


class HostnameJsonFormatter(JsonFormatter):
    """JSON 포맷터에 hostname 필드 추가"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("hostname", socket.gethostname())


def build_log_config(level: str = "INFO") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": HostnameJsonFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "catalog": {
                "handlers": ["console"],
                "level": level,
                "propagate": False
            },
            "uvicorn.access": {
                "level": "WARNING",
            },
            "sqlalchemy.engine": {
                "level": "WARNING",
            },
        }
    }


def setup_logging(level: str = "INFO"):
    # 로깅 설정 적용
    dictConfig(build_log_config(level.upper()))
    logger = logging.getLogger("catalog")
    logger.debug("Logging configured.", extra={"level": level})
    return logger
