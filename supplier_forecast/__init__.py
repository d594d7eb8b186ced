from .config import config
from .db import db, session_scope
from .logging_setup import logger, get_logger
from .exceptions import (
    SupplierForecastError, ValidationError, AuthenticationError,
    AuthorizationError, NotFoundError, ForecastError, DatabaseError
)

__all__ = [
    'config',
    'db',
    'session_scope',
    'logger',
    'get_logger',
    'SupplierForecastError',
    'ValidationError',
    'AuthenticationError',
    'AuthorizationError',
    'NotFoundError',
    'ForecastError',
    'DatabaseError'
]
