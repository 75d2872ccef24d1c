"""
JSON structured logging configuration using python-json-logger
"""
import logging
import logging.config
import sys
from typing import Dict, Any

import pythonjsonlogger.jsonlogger

from app.config import get_settings


# Shared application logger, configured by setup_logging()
logger = logging.getLogger("app")


class CustomJsonFormatter(pythonjsonlogger.jsonlogger.JsonFormatter):
    """Custom JSON formatter with additional fields"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['service'] = 'idea-factory'

        # Pipeline run correlation
        if hasattr(record, 'run_id'):
            log_record['run_id'] = record.run_id

        if hasattr(record, 'request_id'):
            log_record['request_id'] = record.request_id


def build_logging_config(log_level: str, environment: str) -> Dict[str, Any]:
    """Build the dictConfig mapping for the given level and environment"""
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'json': {
                '()': CustomJsonFormatter,
                'format': '%(asctime)s %(name)s %(levelname)s %(message)s'
            },
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'level': log_level,
                'formatter': 'json' if environment == 'production' else 'standard',
                'stream': sys.stdout
            }
        },
        'loggers': {
            'app': {
                'level': log_level,
                'handlers': ['console'],
                'propagate': False
            },
            'uvicorn': {
                'level': 'INFO',
                'handlers': ['console'],
                'propagate': False
            },
            'uvicorn.access': {
                'level': 'INFO',
                'handlers': ['console'],
                'propagate': False
            }
        },
        'root': {
            'level': log_level,
            'handlers': ['console']
        }
    }


def setup_logging() -> None:
    """Setup JSON structured logging"""
    settings = get_settings()

    logging.config.dictConfig(
        build_logging_config(settings.LOG_LEVEL, settings.ENVIRONMENT)
    )

    logger.info(
        "Logging configured",
        extra={
            'log_level': settings.LOG_LEVEL,
            'environment': settings.ENVIRONMENT
        }
    )
