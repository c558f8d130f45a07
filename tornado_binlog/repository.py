"""Queries the master over a regular SQL connection.

The replication stream itself cannot run SQL once the dump has started, so
master status and checksum settings are read through PyMySQL.
"""
import logging

import pymysql

from .err import BinLogNotEnabled

logger = logging.getLogger(__name__)


class MySQLRepository(object):
    """Default MasterStatusLookup, one short lived connection per call."""

    def __init__(self, config, connect=pymysql.connect):
        self.config = config
        self._connect = connect

    def _query_one(self, sql):
        conn = self._connect(host=self.config.host, port=self.config.port,
                             user=self.config.user,
                             password=self.config.password)
        try:
            with conn.cursor() as cur:
                cur.execute(sql)
                return cur.fetchone()
        finally:
            conn.close()

    def get_master_status(self):
        """Return ``(file, position)`` of the master's current binlog."""
        row = self._query_one("SHOW MASTER STATUS")
        if row is None:
            raise BinLogNotEnabled(1381, "You are not using binary logging")
        logger.debug("master status: %s:%s", row[0], row[1])
        return row[0], int(row[1])

    def is_checksum(self):
        """Return True if binlog-checksum is enabled (MySQL >= 5.6)."""
        row = self._query_one("SHOW GLOBAL VARIABLES LIKE 'BINLOG_CHECKSUM'")
        if row is None:
            return False
        return row[1] != 'NONE'
