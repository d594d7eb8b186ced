# supplier_forecast/db/__init__.py
from .connection import DatabaseConnection, db, session_scope

from supplier_forecast.exceptions import DatabaseError


def initialize():
    """Initialize database connection and create tables if needed."""
    try:
        db.test_connection()
        db.create_all()
    except DatabaseError:
        raise
    except Exception as e:
        raise DatabaseError(f"Database initialization failed: {str(e)}")

__all__ = [
    'db',
    'initialize',
    'session_scope',
    'DatabaseConnection'
]
