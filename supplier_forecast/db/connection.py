# supplier_forecast/db/connection.py
from contextlib import contextmanager
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from supplier_forecast.config import config
from supplier_forecast.exceptions import DatabaseError
from supplier_forecast.models import Base


class DatabaseConfig:
    """Configuration for database connections."""

    @staticmethod
    def get_connection_string() -> str:
        """Get the SQLAlchemy connection string."""
        return config.get_db_url()

    @staticmethod
    def get_engine_options(url: str) -> Dict[str, Any]:
        """Get engine keyword arguments for the given URL.

        SQLite does not take pool sizing options; in-memory SQLite shares a
        single connection so every session sees the same database.
        """
        db_config = config.db_config

        if url.startswith('sqlite'):
            options = {'echo': db_config['echo']}
            if url in ('sqlite://', 'sqlite:///:memory:'):
                options['connect_args'] = {'check_same_thread': False}
                options['poolclass'] = StaticPool
            return options

        return {
            'pool_size': db_config['pool_size'],
            'max_overflow': db_config['max_overflow'],
            'pool_recycle': db_config['pool_recycle'],
            'echo': db_config['echo']
        }


class DatabaseConnection:
    """Lazily initialized SQLAlchemy engine and session factory."""

    _instance = None
    _engine = None
    _SessionLocal = None

    def __new__(cls):
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def configure(self, url: Optional[str] = None, **engine_options):
        """(Re)create the engine for the given URL.

        Args:
            url: Database URL, defaults to the configured one
            **engine_options: Extra keyword arguments for create_engine
        """
        url = url or DatabaseConfig.get_connection_string()

        if self._engine is not None:
            self._engine.dispose()

        try:
            options = DatabaseConfig.get_engine_options(url)
            options.update(engine_options)

            self._engine = create_engine(url, **options)
            self._SessionLocal = sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=self._engine
            )
        except Exception as e:
            raise DatabaseError(f"Failed to initialize database connection: {str(e)}")

    def _ensure_configured(self):
        if self._engine is None:
            self.configure()

    def test_connection(self):
        """Run a trivial query against the database."""
        self._ensure_configured()
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            raise DatabaseError(f"Database connection test failed: {str(e)}")

    def create_all(self):
        """Create all tables."""
        self._ensure_configured()
        Base.metadata.create_all(bind=self._engine)

    def drop_all(self):
        """Drop all tables."""
        self._ensure_configured()
        Base.metadata.drop_all(bind=self._engine)

    @contextmanager
    def session_scope(self) -> Session:
        """Provide transaction scope for database operations."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_session(self) -> Session:
        """Get a new database session."""
        self._ensure_configured()
        return self._SessionLocal()

# Singleton instance
db = DatabaseConnection()

# Convenience function for session scope
@contextmanager
def session_scope():
    """Context manager for database sessions."""
    with db.session_scope() as session:
        yield session
