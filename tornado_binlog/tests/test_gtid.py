import struct

import pytest

from tornado_binlog import err
from tornado_binlog.gtid import Gtid, GtidEncoder, GtidSet

SID = '3E11FA47-71CA-11E1-9E33-C80AA9429562'
SID_BYTES = bytes.fromhex('3e11fa4771ca11e19e33c80aa9429562')


def test_single_gtid():
    gtid = Gtid(SID + ':1-5:7')
    assert gtid.sid == SID.lower()
    assert gtid.intervals == [(1, 6), (7, 8)]
    assert str(gtid) == SID.lower() + ':1-5:7'
    assert gtid.encoded_length == 16 + 8 + 32
    assert gtid.encode() == SID_BYTES + struct.pack('<QQQQQ', 2, 1, 6, 7, 8)


def test_set_encoding():
    other = '1c2aad49-ae92-409a-b4df-d05a03e4702e:42-47'
    length, blob = GtidEncoder().encode(SID + ':1-5,\n' + other)
    assert length == len(blob) == 8 + (16 + 8 + 16) * 2
    assert blob[:8] == struct.pack('<Q', 2)
    assert blob[8:24] == SID_BYTES
    assert blob.endswith(struct.pack('<QQQ', 1, 42, 48))


def test_set_str():
    text = '3e11fa47-71ca-11e1-9e33-c80aa9429562:1-5,1c2aad49-ae92-409a-b4df-d05a03e4702e:9'
    assert str(GtidSet(text)) == text


@pytest.mark.parametrize('text', [
    '',
    ',',
    'not-a-uuid:1-5',
    SID,
    SID + ':',
    SID + ':5-1',
    SID + ':0',
    SID + ':a-b',
])
def test_invalid(text):
    with pytest.raises(err.ConfigError):
        GtidEncoder().encode(text)
