import pytest

from tornado_binlog import err
from tornado_binlog.buffer import ByteBuffer
from tornado_binlog.constants import EVENT_TYPE
from tornado_binlog.packet import (
    INCOMPLETE, MysqlPacket, interpret, read_event_header, read_status,
    try_extract_packet)
from tornado_binlog.tests.base import err_packet, event_payload, frame


def extract_all(chunks):
    buf = ByteBuffer()
    packets = []
    for chunk in chunks:
        buf.append(chunk)
        while True:
            packet = try_extract_packet(buf)
            if packet is INCOMPLETE:
                break
            packets.append(packet.get_all_data())
    return packets, len(buf)


def test_chunk_boundaries_do_not_matter():
    payloads = [b'\x00first', b'\x00' + b's' * 300, b'\x00', b'\x00last']
    stream = b''.join(frame(p, i) for i, p in enumerate(payloads))

    whole = extract_all([stream])
    bytewise = extract_all([stream[i:i+1] for i in range(len(stream))])
    uneven = extract_all([stream[:3], stream[3:11], stream[11:320], stream[320:]])

    assert whole == (payloads, 0)
    assert bytewise == whole
    assert uneven == whole


def test_incomplete_leaves_buffer_untouched():
    data = frame(b'\x00payload', 1)
    for size in (0, 3, 4, len(data) - 1):
        buf = ByteBuffer(data[:size])
        assert try_extract_packet(buf) is INCOMPLETE
        assert len(buf) == size
        assert buf.peek(size) == data[:size]


def test_extract_keeps_sequence_and_rest():
    buf = ByteBuffer(frame(b'\x00abc', 7) + b'\x05\x00')
    packet = try_extract_packet(buf)
    assert packet.packet_number == 7
    assert bytes(packet) == b'\x00abc'
    assert len(buf) == 2


def test_empty_payload():
    buf = ByteBuffer(frame(b'', 0))
    packet = try_extract_packet(buf)
    assert len(packet) == 0
    assert len(buf) == 0


@pytest.mark.parametrize('first', [b'\x00', b'\xfe'])
def test_success_markers(first):
    assert read_status(first + b'rest').ok
    packet = MysqlPacket(first + b'rest')
    assert interpret(packet) is packet


def test_error_status():
    payload = err_packet(1236, 'Could not find first log file')[4:]
    status = read_status(payload)
    assert not status.ok
    assert status.code == 1236
    assert status.message == 'Could not find first log file'
    with pytest.raises(err.ProtocolStatusError) as cm:
        interpret(MysqlPacket(payload))
    assert cm.value.args == (1236, 'Could not find first log file')


def test_other_first_byte_is_error():
    status = read_status(b'\x0a\x01\x02')
    assert not status.ok
    assert status.message == ''


def test_empty_payload_is_error():
    status = read_status(b'')
    assert not status.ok
    assert status.code == 0


def test_interpret_without_status_check():
    packet = MysqlPacket(b'\x0a5.7.30\0')
    assert interpret(packet, check_status=False) is packet


def test_read_event_header():
    header = read_event_header(event_payload(EVENT_TYPE.XID_EVENT, log_pos=999, body=b'12345678'))
    assert header.timestamp == 1600000000
    assert header.event_type == EVENT_TYPE.XID_EVENT
    assert header.server_id == 1
    assert header.event_size == 27
    assert header.log_pos == 999
    assert header.flags == 0
    assert read_event_header(b'\x00short') is None


def test_event_type_name():
    assert EVENT_TYPE.event_type_name(EVENT_TYPE.HEARTBEAT_EVENT) == 'HEARTBEAT_EVENT'
    assert EVENT_TYPE.event_type_name(0x99) == 'UNKNOWN_EVENT(153)'


def test_extra_auth_data():
    assert MysqlPacket(b'\x01\x03').is_extra_auth_data()
    assert not MysqlPacket(b'\x00\x00\x00').is_extra_auth_data()
    assert not MysqlPacket(b'').is_extra_auth_data()
