# repository/base_repository.py
# Version 02.00.00.00 dated 20261019
# Base repository pattern for the catalog store

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, List, Dict, Any, Generator

from errors import StoreUnavailableError
from logging_config import get_logger

logger = get_logger(__name__)


class DatabaseConnection:
    """
    Owns one SQLite catalog file and hands out configured connections.

    Instances are constructed explicitly and passed to every repository and
    service, so tests can run against isolated databases.

    Guarantees:
    - Connections are configured (foreign keys, WAL mode, dict rows)
    - No repository touches the file before initialize() has created the schema
    - Connections are always closed
    """

    def __init__(self, db_path: str):
        """
        Args:
            db_path: Path of the SQLite database file
        """
        self._db_path = str(db_path)
        self._ready = False
        logger.info(f"DatabaseConnection created with path: {self._db_path}")

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def is_ready(self) -> bool:
        return self._ready

    def initialize(self):
        """
        Create the database file (and its folder) and apply the schema.

        Raises:
            StoreUnavailableError: If the file cannot be created or the schema fails
        """
        from .schema import get_schema_sql

        try:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            with self._open() as conn:
                conn.executescript(get_schema_sql())
                conn.commit()
        except (OSError, sqlite3.Error) as e:
            self._ready = False
            logger.error(f"Could not initialize catalog at {self._db_path}: {e}", exc_info=True)
            raise StoreUnavailableError(f"Catalog store unavailable: {e}") from e

        self._ready = True
        logger.info(f"Catalog schema ready at {self._db_path}")

    def ensure_ready(self):
        """Raise StoreUnavailableError unless initialize() has succeeded."""
        if not self._ready:
            raise StoreUnavailableError(f"Catalog store not initialized: {self._db_path}")

    @contextmanager
    def _open(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path, timeout=10.0, check_same_thread=False)
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def get_connection(self, read_only: bool = False) -> Generator[sqlite3.Connection, None, None]:
        """
        Get a database connection as a context manager.

        Args:
            read_only: If True, the connection refuses writes (PRAGMA query_only)

        Yields:
            sqlite3.Connection: Database connection with dict rows

        Raises:
            StoreUnavailableError: If the store is not initialized or cannot be opened

        Example:
            with db_conn.get_connection() as conn:
                cur = conn.cursor()
                cur.execute("SELECT * FROM pictures")
        """
        self.ensure_ready()

        try:
            conn = sqlite3.connect(self._db_path, timeout=10.0, check_same_thread=False)
        except sqlite3.Error as e:
            logger.error(f"Database connection error: {e}", exc_info=True)
            raise StoreUnavailableError(f"Cannot open catalog store: {e}") from e

        try:
            conn.execute("PRAGMA foreign_keys = ON")

            if read_only:
                conn.execute("PRAGMA query_only = ON")
            else:
                try:
                    conn.execute("PRAGMA journal_mode=WAL")
                except sqlite3.OperationalError:
                    logger.warning("Could not enable WAL mode")

            conn.row_factory = self._dict_factory
            yield conn

        except sqlite3.Error:
            try:
                conn.rollback()
            except sqlite3.Error as rollback_error:
                logger.warning(f"Rollback failed: {rollback_error}")
            raise
        finally:
            conn.close()

    @staticmethod
    def _dict_factory(cursor: sqlite3.Cursor, row: tuple) -> Dict[str, Any]:
        """Convert row tuples to dictionaries using column names."""
        return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


class BaseRepository(ABC):
    """
    Shared row access for the catalog tables.

    Repositories handle all database operations for one catalog entity and
    hold no state between calls; every method re-reads from the store.

    Usage:
        class PictureRepository(BaseRepository):
            def get_by_path(self, path: str) -> Optional[Dict]:
                with self.connection(read_only=True) as conn:
                    cur = conn.cursor()
                    cur.execute("SELECT * FROM pictures WHERE path = ?", (path,))
                    return cur.fetchone()
    """

    def __init__(self, db_connection: DatabaseConnection):
        """
        Args:
            db_connection: Shared DatabaseConnection for the catalog
        """
        self._db_connection = db_connection
        self.logger = get_logger(self.__class__.__name__)

    @property
    def db_connection(self) -> DatabaseConnection:
        return self._db_connection

    @contextmanager
    def connection(self, read_only: bool = False) -> Generator[sqlite3.Connection, None, None]:
        """
        Open a catalog connection (see DatabaseConnection.get_connection).

        Args:
            read_only: Refuse writes on this connection

        Yields:
            Database connection
        """
        with self._db_connection.get_connection(read_only=read_only) as conn:
            yield conn

    @abstractmethod
    def _table_name(self) -> str:
        """Catalog table backing this repository."""
        pass

    @abstractmethod
    def _key_column(self) -> str:
        """Return the primary key column of the table."""
        pass

    def count(self, where_clause: str = "", params: tuple = ()) -> int:
        """
        Number of catalog rows, optionally filtered.

        Args:
            where_clause: SQL condition, e.g. "auto_reindex = 1"
            params: Bound values for where_clause

        Returns:
            Number of matching rows
        """
        sql = f"SELECT COUNT(*) as count FROM {self._table_name()}"
        if where_clause:
            sql += f" WHERE {where_clause}"

        with self.connection(read_only=True) as conn:
            cur = conn.cursor()
            cur.execute(sql, params)
            result = cur.fetchone()
            return result['count'] if result else 0

    def exists(self, key_value: Any) -> bool:
        """Check whether a row with this primary key exists."""
        return self.count(f"{self._key_column()} = ?", (key_value,)) > 0

    def find_by_key(self, key_value: Any) -> Optional[Dict[str, Any]]:
        """
        Find a single row by primary key.

        Args:
            key_value: The key value to search for

        Returns:
            Row dict, or None
        """
        sql = f"SELECT * FROM {self._table_name()} WHERE {self._key_column()} = ?"

        with self.connection(read_only=True) as conn:
            cur = conn.cursor()
            cur.execute(sql, (key_value,))
            return cur.fetchone()

    def find_all(self,
                 where_clause: str = "",
                 params: tuple = (),
                 order_by: str = "") -> List[Dict[str, Any]]:
        """
        Rows of the table, ordered by order_by or by key.

        Args:
            where_clause: SQL condition without the WHERE keyword
            params: Bound values for where_clause
            order_by: Optional ORDER BY clause (e.g., "added_at DESC")

        Returns:
            List of row dicts
        """
        sql = f"SELECT * FROM {self._table_name()}"

        if where_clause:
            sql += f" WHERE {where_clause}"
        sql += f" ORDER BY {order_by or self._key_column()}"

        with self.connection(read_only=True) as conn:
            cur = conn.cursor()
            cur.execute(sql, params)
            return cur.fetchall()

    def delete_by_key(self, key_value: Any, conn: Optional[sqlite3.Connection] = None) -> bool:
        """
        Delete a row by primary key.

        Args:
            key_value: The key value
            conn: Optional connection of an enclosing TransactionContext

        Returns:
            True if a row was deleted
        """
        sql = f"DELETE FROM {self._table_name()} WHERE {self._key_column()} = ?"

        if conn is not None:
            deleted = conn.execute(sql, (key_value,)).rowcount > 0
        else:
            with self.connection() as own_conn:
                cur = own_conn.cursor()
                cur.execute(sql, (key_value,))
                own_conn.commit()
                deleted = cur.rowcount > 0

        if deleted:
            self.logger.info(f"Deleted {self._key_column()}={key_value} from {self._table_name()}")

        return deleted


class TransactionContext:
    """
    Context manager for database transactions spanning several repositories.

    Usage:
        with TransactionContext(db_connection) as conn:
            tag_repo.delete_associations_for_tag(name, conn=conn)
            tag_repo.delete_by_key(name, conn=conn)
            # both statements commit together
    """

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection
        self._cm = None
        self.conn = None

    def __enter__(self) -> sqlite3.Connection:
        self._cm = self.db_connection.get_connection()
        self.conn = self._cm.__enter__()
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                try:
                    self.conn.commit()
                    logger.debug("Transaction committed")
                except sqlite3.Error as e:
                    logger.error(f"Commit failed: {e}", exc_info=True)
                    self.conn.rollback()
                    raise
            else:
                logger.warning(f"Rolled back catalog transaction: {exc_val}")
                self.conn.rollback()
        finally:
            self._cm.__exit__(None, None, None)

        return False
