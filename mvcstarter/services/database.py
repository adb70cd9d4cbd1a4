import logging
import socket
import sqlite3
from typing import Callable, Dict, Optional, Tuple

from ..core.config import DatabaseDescriptor


logger = logging.getLogger(__name__)


class TcpProbe:
    """Checks that the database server accepts TCP connections."""

    def __init__(self, database: DatabaseDescriptor, timeout_seconds: float = 2.0):
        self.database = database
        self.timeout_seconds = timeout_seconds

    def check(self) -> None:
        with socket.create_connection((self.database.host, self.database.port), timeout=self.timeout_seconds):
            pass


class SqliteProbe:
    def __init__(self, database: DatabaseDescriptor, timeout_seconds: float = 2.0):
        self.database = database
        self.timeout_seconds = timeout_seconds

    def check(self) -> None:
        connection = sqlite3.connect(self.database.name, timeout=self.timeout_seconds)
        try:
            connection.execute("SELECT 1")
        finally:
            connection.close()


# Driver name -> probe constructor
PROBES: Dict[str, Callable[..., object]] = {
    "mysql": TcpProbe,
    "pgsql": TcpProbe,
    "postgresql": TcpProbe,
    "sqlite": SqliteProbe,
}


def create_probe(database: DatabaseDescriptor, timeout_seconds: float = 2.0):
    try:
        factory = PROBES[database.driver]
    except KeyError:
        raise ValueError(f"Unsupported database driver: {database.driver}")
    return factory(database, timeout_seconds=timeout_seconds)


def check_connection(database: DatabaseDescriptor, timeout_seconds: float = 2.0) -> Tuple[bool, Optional[str]]:
    try:
        create_probe(database, timeout_seconds).check()
        return True, None
    except Exception as e:
        logger.warning(f"Database check failed for {database.url()}: {e}")
        return False, str(e)
