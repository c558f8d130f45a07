# Framing and status handling for MySQL protocol packets
# https://dev.mysql.com/doc/internals/en/mysql-packet.html
import collections
import logging
import struct

from . import err
from .constants import EVENT_TYPE

DEBUG = False

logger = logging.getLogger(__name__)

HEADER_LENGTH = 4
OK_HEADERS = (0x00, 0xfe)

#: Returned by :func:`try_extract_packet` while a frame is not complete yet.
INCOMPLETE = None

StatusResult = collections.namedtuple('StatusResult', 'ok code message')
STATUS_OK = StatusResult(True, None, None)

EventHeader = collections.namedtuple(
    'EventHeader', 'timestamp event_type server_id event_size log_pos flags')
_event_header = struct.Struct('<IBIIIH')


def dump_packet(data):  # pragma: no cover
    def is_ascii(c):
        if 65 <= c <= 122:
            return chr(c)
        return '.'

    lines = ["packet length: %d" % len(data), "-" * 88]
    for i in range(0, min(len(data), 256), 16):
        d = data[i:i+16]
        lines.append(' '.join("{:02X}".format(x) for x in d) +
                     '   ' * (16 - len(d)) + ' ' * 2 +
                     ' '.join(is_ascii(x) for x in d))
    lines.append("-" * 88)
    logger.debug('\n'.join(lines))


def read_uint24(data, offset=0):
    """Read 3 bytes of data beginning at offset"""
    low, high = struct.unpack_from('<HB', data, offset)
    return low + (high << 16)


class MysqlPacket(object):
    """One MySQL packet payload, header removed."""
    __slots__ = ('_data', 'packet_number')

    def __init__(self, data, packet_number=0):
        self._data = bytes(data)
        self.packet_number = packet_number

    def __bytes__(self):
        return self._data

    def __len__(self):
        return len(self._data)

    def __repr__(self):
        return '<MysqlPacket #%d len=%d>' % (self.packet_number, len(self._data))

    def get_all_data(self):
        return self._data

    def is_extra_auth_data(self):
        # https://dev.mysql.com/doc/internals/en/successful-authentication.html
        return self._data[0:1] == b'\x01'

    def is_error_packet(self):
        return not self._data or self._data[0] not in OK_HEADERS

    def check_error(self):
        if self.is_error_packet():
            err.raise_mysql_exception(self._data)


def try_extract_packet(buffer):
    """Pull one complete packet off the front of *buffer*.

    Returns :data:`INCOMPLETE` and leaves the buffer untouched when the
    header or the declared payload has not fully arrived yet.
    """
    if len(buffer) < HEADER_LENGTH:
        return INCOMPLETE
    header = buffer.peek(HEADER_LENGTH)
    bytes_to_read = read_uint24(header)
    if len(buffer) < HEADER_LENGTH + bytes_to_read:
        return INCOMPLETE
    buffer.take_front(HEADER_LENGTH)
    # sequence id is not validated
    packet = MysqlPacket(buffer.take_front(bytes_to_read), header[3])
    if DEBUG:
        dump_packet(header + packet.get_all_data())
    return packet


def read_status(data):
    """Classify a payload by its first byte."""
    if data and data[0] in OK_HEADERS:
        return STATUS_OK
    code, message = err._get_error_info(data)
    return StatusResult(False, code, message)


def interpret(packet, check_status=True):
    """Return *packet* if it carries a success marker.

    With *check_status* off the packet is returned unexamined, which is what
    the initial handshake needs: its first byte is the protocol version.
    """
    if check_status:
        packet.check_error()
    return packet


def read_event_header(data):
    """Decode the common binlog event header that follows the OK byte."""
    data = bytes(data)
    if len(data) < 1 + _event_header.size:
        return None
    return EventHeader(*_event_header.unpack_from(data, 1))


def describe_event(header):
    return '%s at %d (%d bytes)' % (
        EVENT_TYPE.event_type_name(header.event_type), header.log_pos,
        header.event_size)
