"""
wholesale/utils/logging.py
──────────────────────────
Configures structured logging for the order API.
"""
import os
import logging
from logging.handlers import RotatingFileHandler
from flask import request, has_request_context


class RequestFormatter(logging.Formatter):
    """
    Custom formatter that injects request info (IP, URL)
    into logs if context is available.
    """
    def format(self, record):
        if has_request_context():
            record.url = request.url
            record.remote_addr = request.remote_addr
        else:
            record.url = None
            record.remote_addr = None
        return super().format(record)


def _drop_previous_handlers(app):
    # create_app may run several times per process (tests); app.logger is shared
    for handler in list(app.logger.handlers):
        if getattr(handler, 'wholesale_handler', False):
            app.logger.removeHandler(handler)
            handler.close()


def setup_logging(app):
    """
    Configure rotating file logging: <LOG_DIR>/app.log
    Max size: 5MB
    Backup count: 5 files
    Format: timestamp | level | module | ip | url | message
    """
    _drop_previous_handlers(app)

    # 1. File Logger (skipped when LOG_DIR is unset or not writable)
    log_dir = app.config.get('LOG_DIR')
    if log_dir:
        if not os.path.isabs(log_dir):
            log_dir = os.path.join(app.root_path, '..', log_dir)
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'app.log'),
                maxBytes=5 * 1024 * 1024,
                backupCount=5
            )
        except OSError:
            file_handler = None   # read-only filesystem: stdout only
        if file_handler is not None:
            file_handler.setFormatter(RequestFormatter(
                '%(asctime)s | %(levelname)s | %(name)s | %(remote_addr)s | %(url)s | %(message)s'
            ))
            file_handler.setLevel(logging.INFO)
            file_handler.wholesale_handler = True
            app.logger.addHandler(file_handler)

    # 2. Stdout Logger (picked up by the container/platform log collector)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s'
    ))
    stream_handler.setLevel(logging.INFO)
    stream_handler.wholesale_handler = True
    app.logger.addHandler(stream_handler)

    app.logger.setLevel(logging.INFO)
    app.logger.info("Wholesale ordering API startup")
