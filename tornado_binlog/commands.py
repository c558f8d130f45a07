# Outbound commands of the replication handshake
# https://dev.mysql.com/doc/internals/en/replication-protocol.html
import struct

from .constants import COMMAND
from .util import int2byte


class Command(object):
    """One framed client command: a 4 byte length prefix and the payload
    (command byte included) it counts."""
    __slots__ = ('length_prefix', 'payload')

    def __init__(self, length, payload):
        object.__setattr__(self, 'length_prefix', struct.pack('<I', length))
        object.__setattr__(self, 'payload', bytes(payload))

    def __setattr__(self, name, value):
        raise AttributeError("Command is immutable")

    def __bytes__(self):
        return self.length_prefix + self.payload

    def __len__(self):
        return len(self.length_prefix) + len(self.payload)

    def __repr__(self):
        return '<Command 0x%02x len=%d>' % (self.payload[0], len(self.payload))

    @property
    def command(self):
        return self.payload[0]


def _encode(value):
    if isinstance(value, str):
        return value.encode('utf-8')
    return bytes(value)


def query(sql):
    """COM_QUERY carrying a text statement, e.g. ``SET @var = ...``"""
    sql = _encode(sql)
    return Command(len(sql) + 1, int2byte(COMMAND.COM_QUERY) + sql)


def register_slave(server_id):
    # 1              [15] COM_REGISTER_SLAVE
    # 4              server-id
    # 1              slaves hostname length (empty)
    # 1              slaves user length (empty)
    # 1              slaves password length (empty)
    # 2              slaves mysql-port
    # 4              replication rank
    # 4              master-id
    payload = (int2byte(COMMAND.COM_REGISTER_SLAVE) +
               struct.pack('<I', server_id) +
               b'\0\0\0' +
               struct.pack('<H', 0) +
               struct.pack('<I', 0) +
               struct.pack('<I', 0))
    return Command(18, payload)


def binlog_dump(server_id, log_file, log_pos):
    # log_pos (4) -- position in the binlog-file to start the stream with
    # flags (2) -- 0, blocking dump
    # server_id (4) -- server id of this slave
    # log_file (string.EOF) -- filename of the binlog on the master
    log_file = _encode(log_file)
    payload = (int2byte(COMMAND.COM_BINLOG_DUMP) +
               struct.pack('<I', log_pos) +
               struct.pack('<H', 0) +
               struct.pack('<I', server_id) +
               log_file)
    return Command(len(log_file) + 11, payload)


def binlog_dump_gtid(server_id, encoded_length, encoded):
    # Packet type     byte   1byte   == 0x1e
    # Binlog flags    ushort 2bytes  == 0
    # Server id       uint   4bytes
    # binlognamesize  uint   4bytes  == 3
    # binlogname      str    3bytes  zeroified
    # binlog position ulong  8bytes  == 4
    # payload_size    uint   4bytes
    # payload         encoded gtid set
    payload = (int2byte(COMMAND.COM_BINLOG_DUMP_GTID) +
               struct.pack('<H', 0) +
               struct.pack('<I', server_id) +
               struct.pack('<I', 3) +
               b'\0\0\0' +
               struct.pack('<Q', 4) +
               struct.pack('<I', encoded_length) +
               _encode(encoded))
    return Command(26 + encoded_length, payload)
