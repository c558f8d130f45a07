import os
import sys

from .err import ConfigError
from .gtid import GtidSet
from .optionfile import Parser

try:
    import getpass
    DEFAULT_USER = getpass.getuser()
    del getpass
except (ImportError, KeyError):
    DEFAULT_USER = None


# 4294967 is documented as the max value for heartbeats
MAX_HEARTBEAT_PERIOD = 4294967

DEFAULT_SLAVE_ID = 666


class ReplicationConfig(object):
    """
    Settings of one replication session. Accepts several arguments:

    host: Host where the master is located. (default: localhost)
    port: MySQL port to use, default is usually OK. (default: 3306)
    user: Username to log in as
    password: Password to use.
    slave_id: server_id this client registers with. Must be unique among
        the replicas of the master. (default: 666)
    check_sum: Whether the master writes binlog checksums. None means ask
        the master. (default: None)
    log_file, log_pos: Binlog coordinates to start from. When either is
        missing the current master position is used.
    gtid: MySQL GTID set to start after. Takes precedence over coordinates.
    mariadb_gtid: MariaDB GTID connect state (``@slave_connect_state``).
    slave_uuid: Reported in SHOW SLAVE HOSTS.
    heartbeat_period: Seconds between master heartbeats while idle.
    read_default_file:
        Specifies my.cnf file to read these parameters from under the [client] section.
    read_default_group: Group to read from in the configuration file.
    """

    def __init__(self, host=None, port=0, user=None, password="",
                 slave_id=None, check_sum=None, log_file='', log_pos='',
                 gtid='', mariadb_gtid='', slave_uuid=None,
                 heartbeat_period=None, read_default_file=None,
                 read_default_group=None, passwd=None, server_id=None):
        if passwd is not None and not password:
            password = passwd
        if server_id is not None:
            slave_id = server_id

        if read_default_group and not read_default_file:
            if sys.platform.startswith("win"):
                read_default_file = "c:\\my.ini"
            else:
                read_default_file = "/etc/my.cnf"

        if read_default_file:
            if not read_default_group:
                read_default_group = "client"

            cfg = Parser()
            cfg.read(os.path.expanduser(read_default_file))

            def _config(key, arg):
                if arg:
                    return arg
                return cfg.get(read_default_group, key, fallback=arg)

            user = _config("user", user)
            password = _config("password", password)
            host = _config("host", host)
            port = int(_config("port", port))
            slave_id = _config("server-id", slave_id)
            log_file = _config("master-log-file", log_file)
            log_pos = _config("master-log-pos", log_pos)
            gtid = _config("gtid", gtid)
            mariadb_gtid = _config("mariadb-gtid", mariadb_gtid)
            slave_uuid = _config("slave-uuid", slave_uuid)

        self.host = host or "localhost"
        self.port = port or 3306
        self.user = user or DEFAULT_USER
        self.password = password or ""
        self.slave_id = DEFAULT_SLAVE_ID if slave_id is None else int(slave_id)
        self.check_sum = check_sum
        self.log_file = log_file or ''
        self.log_pos = '' if log_pos in (None, '') else int(log_pos)
        self.gtid = gtid or ''
        self.mariadb_gtid = mariadb_gtid or ''
        self.slave_uuid = slave_uuid
        self.heartbeat_period = heartbeat_period

    @property
    def has_position(self):
        return self.log_file != '' and self.log_pos != ''

    def heartbeat_nanoseconds(self):
        heartbeat = min(float(self.heartbeat_period), MAX_HEARTBEAT_PERIOD)
        # master_heartbeat_period is nanoseconds
        return int(heartbeat * 1000000000)

    def validate(self):
        if not self.host:
            raise ConfigError('Host name is required')
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ConfigError('Port must be 1-65535, got %r' % (self.port,))
        if not self.user:
            raise ConfigError('Did not specify a username')
        if not isinstance(self.slave_id, int) or not 0 < self.slave_id < 2**32:
            raise ConfigError('slave_id must be a positive 32 bit integer, got %r'
                              % (self.slave_id,))
        if self.log_pos != '' and not 0 <= self.log_pos < 2**32:
            raise ConfigError('log_pos must be a 32 bit integer, got %r' % (self.log_pos,))
        if self.gtid:
            GtidSet(self.gtid)
        if "'" in self.mariadb_gtid:
            raise ConfigError('Invalid MariaDB GTID connect state %r' % (self.mariadb_gtid,))
        if self.slave_uuid is not None and "'" in self.slave_uuid:
            raise ConfigError('Invalid slave_uuid %r' % (self.slave_uuid,))
        if self.heartbeat_period is not None and float(self.heartbeat_period) <= 0:
            raise ConfigError('heartbeat_period must be positive')
