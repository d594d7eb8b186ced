import logging
import logging.handlers
from pathlib import Path

from flask import g, has_request_context

from supplier_forecast.config import config

ROOT_LOGGER_NAME = 'supplier_forecast'
NO_SUPPLIER = '-'


class SupplierContextFilter(logging.Filter):
    """Stamp records with the portal supplier served by the current request.

    Outside a request, or before the token is verified, ``supplier_id`` is
    NO_SUPPLIER so format strings can always reference it.
    """

    def filter(self, record):
        supplier_id = None
        if has_request_context():
            supplier_id = g.get('supplier_id')
        record.supplier_id = NO_SUPPLIER if supplier_id is None else supplier_id
        return True


class Logger:
    """Configures the ``supplier_forecast`` logger hierarchy once per process.

    Handlers hang off the package logger; modules log through children of
    it (``logging.getLogger(__name__)`` or ``get_logger('cli')``), so every
    record gets the supplier context and ends up in one rotating file.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger if not already initialized."""
        if self._initialized:
            return

        self._log_config = config.log_config
        self._package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        self._configure_package_logger()

        self._initialized = True

    def _configure_package_logger(self):
        level = getattr(logging, self._log_config['level'].upper(), logging.INFO)
        formatter = logging.Formatter(self._log_config['format'])
        context_filter = SupplierContextFilter()

        package_logger = self._package_logger
        package_logger.setLevel(level)

        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)

        handlers = []
        if self._log_config['console_output']:
            handlers.append(logging.StreamHandler())

        if self._log_config['file_output']:
            log_dir = Path(self._log_config['directory'])
            log_dir.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.handlers.RotatingFileHandler(
                log_dir / f"{ROOT_LOGGER_NAME}.log",
                maxBytes=self._log_config['max_size_mb'] * 1024 * 1024,
                backupCount=self._log_config['backup_count']
            ))

        for handler in handlers:
            handler.setFormatter(formatter)
            handler.addFilter(context_filter)
            package_logger.addHandler(handler)

    def get_logger(self, name):
        """Get a child of the package logger.

        Args:
            name: Short name ('api', 'cli') or a dotted module path

        Returns:
            Logger instance
        """
        if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
            return logging.getLogger(name)
        return self._package_logger.getChild(name)

    def log_exception(self, logger_name, exception, message=None):
        """Log an exception with its traceback as a single record.

        Args:
            logger_name: Logger name
            exception: Exception object
            message: Optional message to include
        """
        text = f"{message}: {exception}" if message else str(exception)
        self.get_logger(logger_name).error(text, exc_info=exception)


# Global logger instance
logger = Logger()

def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)

def log_exception(logger_name, exception, message=None):
    """Log an exception with stack trace."""
    logger.log_exception(logger_name, exception, message)
