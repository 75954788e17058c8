"""
Logging setup for the Conciliador.

JSON lines (python-json-logger) for hosted runs, plain text for local use.
Every JSON record carries timestamp, level, logger name and the service id.
"""

import logging
import sys
from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = 'conciliador'


class ServiceJsonFormatter(JsonFormatter):

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['name'] = record.name
        log_record['service'] = SERVICE_NAME
        if 'message' not in log_record:
            log_record['message'] = record.getMessage()


def setup_logging(level=logging.INFO, format_as_json=False):
    """
    Configure the root logger with a single stdout handler.

    Args:
        level: logging level or its name ('INFO', 'DEBUG', ...)
        format_as_json: JSON lines when True, human readable text otherwise
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Streamlit re-runs the script on every interaction
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if format_as_json:
        formatter = ServiceJsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%S'
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    return root_logger
