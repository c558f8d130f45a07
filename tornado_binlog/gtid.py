# GTID sets as sent by COM_BINLOG_DUMP_GTID
#
# A gtid set looks like:
#   19d69c1e-ae97-4b8c-a1ef-9e12ba966457:1-3:8-10,
#   1c2aad49-ae92-409a-b4df-d05a03e4702e:42-47:80-100:130-140
#
# 19d69c1e-ae97-4b8c-a1ef-9e12ba966457:1-3:8-10 is one member of the set, a
# gtid. Its sid is 19d69c1e-... and it has two intervals, 1-3 and 8-10.
#
# Binary form, all fields little endian:
#   n_sid           ulong  8bytes
#   | sid           uuid   16bytes
#   | n_intervals   ulong  8bytes
#   | | start       ulong  8bytes
#   | | stop        ulong  8bytes  exclusive
import re
import struct

from .err import ConfigError
from .util import hex_to_bytes

_SID_RE = re.compile(r'^[0-9a-fA-F]{8}(-?[0-9a-fA-F]{4}){3}-?[0-9a-fA-F]{12}$')


class Gtid(object):
    __slots__ = ('sid', 'intervals')

    def __init__(self, gtid):
        sid, sep, rest = gtid.strip().partition(':')
        if not _SID_RE.match(sid) or not sep:
            raise ConfigError('GTID format is incorrect: %r' % (gtid,))
        self.sid = sid.lower()
        self.intervals = [self._parse_interval(i, gtid) for i in rest.split(':')]

    @staticmethod
    def _parse_interval(interval, gtid):
        m = re.match(r'^(\d+)(?:-(\d+))?$', interval.strip())
        if not m:
            raise ConfigError('GTID interval is incorrect: %r' % (gtid,))
        start = int(m.group(1))
        stop = int(m.group(2)) if m.group(2) else start
        if start < 1 or stop < start:
            raise ConfigError('GTID interval is incorrect: %r' % (gtid,))
        return start, stop + 1

    @property
    def encoded_length(self):
        return 16 + 8 + 2 * 8 * len(self.intervals)

    def encode(self):
        buffer = hex_to_bytes(self.sid)
        buffer += struct.pack('<Q', len(self.intervals))
        for start, stop in self.intervals:
            buffer += struct.pack('<QQ', start, stop)
        return buffer

    def __str__(self):
        return self.sid + ''.join(
            ':%d' % start if stop == start + 1 else ':%d-%d' % (start, stop - 1)
            for start, stop in self.intervals)


class GtidSet(object):
    __slots__ = ('gtids',)

    def __init__(self, gtid_set):
        self.gtids = [Gtid(g) for g in gtid_set.replace('\n', '').split(',') if g.strip()]
        if not self.gtids:
            raise ConfigError('GTID set is empty')

    @property
    def encoded_length(self):
        return 8 + sum(gtid.encoded_length for gtid in self.gtids)

    def encoded(self):
        return struct.pack('<Q', len(self.gtids)) + b''.join(
            gtid.encode() for gtid in self.gtids)

    def __str__(self):
        return ','.join(str(gtid) for gtid in self.gtids)


class GtidEncoder(object):
    """Default GTID encoder used by :class:`BinLogConnection`."""

    def encode(self, gtid_set):
        gtids = GtidSet(gtid_set)
        return gtids.encoded_length, gtids.encoded()
