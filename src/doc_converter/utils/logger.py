"""
Logging setup for the converter service.

Everything under the "doc_converter" logger (the Flask app logger and the
module loggers below it) shares one set of handlers. Records emitted while
serving a request carry the client address, method and path. In production
the LibreOffice lifecycle is also written to its own ``office.log``, since
engine crashes are easier to follow without the per-upload noise.
"""
import logging
import os
from logging.handlers import TimedRotatingFileHandler
from flask import has_request_context, request


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(client)s %(method)s %(path)s | %(message)s"
ENGINE_LOGGER = "doc_converter.services.engine"


class RequestContextFilter(logging.Filter):
    """Tag records with the current upload/download request, or '-' outside one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.client = request.remote_addr or "-"
            record.method = request.method
            record.path = request.path
        else:
            record.client = record.method = record.path = "-"
        return True


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(RequestContextFilter())
    logger.addHandler(handler)


def configure_logging(app):
    """Console handler in development, rotating app/office logs plus an error log otherwise."""
    engine_logger = logging.getLogger(ENGINE_LOGGER)
    for logger in (app.logger, engine_logger):
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()

    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    formatter = logging.Formatter(app.config.get("LOG_FORMAT") or LOG_FORMAT)

    if app.debug or os.environ.get("FLASK_ENV") == "development":
        _attach(app.logger, logging.StreamHandler(), level, formatter)

    if app.debug or app.testing:
        return

    log_dir = app.config.get("LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    backups = int(app.config.get("LOG_BACKUP_COUNT", 3))

    def rotating(name):
        return TimedRotatingFileHandler(os.path.join(log_dir, name), when="midnight",
                                        backupCount=backups, encoding="utf-8")

    _attach(app.logger, rotating("app.log"), level, formatter)
    _attach(app.logger, logging.FileHandler(os.path.join(log_dir, "errors.log"), encoding="utf-8"),
            logging.ERROR, formatter)
    # still propagates into app.log
    _attach(engine_logger, rotating("office.log"), level, formatter)
