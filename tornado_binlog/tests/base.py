import asyncio
import struct

from tornado.ioloop import IOLoop
from tornado.testing import AsyncTestCase

from tornado_binlog.constants import CLIENT, EVENT_TYPE
from tornado_binlog.util import pack_int24

SALT = b'12345678abcdefghijkl'


def frame(payload, seq=0):
    return pack_int24(len(payload)) + struct.pack('B', seq) + payload


def ok_packet(seq=1):
    return frame(b'\x00\x00\x00\x02\x00\x00\x00', seq)


def err_packet(errno, message, seq=1):
    payload = b'\xff' + struct.pack('<H', errno) + b'#28000' + message.encode('utf-8')
    return frame(payload, seq)


def handshake_payload(server_version=b'5.7.30-log',
                      plugin=b'mysql_native_password',
                      capabilities=CLIENT.CAPABILITIES):
    return (b'\x0a' + server_version + b'\0' +
            struct.pack('<I', 42) +
            SALT[:8] + b'\0' +
            struct.pack('<H', capabilities & 0xffff) +
            struct.pack('<BHH', 33, 2, capabilities >> 16) +
            struct.pack('B', len(SALT) + 1) +
            b'\0' * 10 +
            SALT[8:] + b'\0' +
            plugin + b'\0')


def handshake_packet(**kwargs):
    return frame(handshake_payload(**kwargs), 0)


def event_payload(event_type=EVENT_TYPE.QUERY_EVENT, log_pos=120, body=b''):
    header = struct.pack('<IBIIIH', 1600000000, event_type, 1,
                         19 + len(body), log_pos, 0)
    return b'\x00' + header + body


def event_packet(seq=1, **kwargs):
    return frame(event_payload(**kwargs), seq)


class FakeTransport(object):
    """In-memory transport replaying a script.

    *greeting* chunks are delivered once a listener is set; every write pops
    the next entry of *replies* and delivers its chunks, each as a separate
    data notification on the next loop iterations. With *end_after* the
    remote side ends the stream right after that many data notifications.
    """

    def __init__(self, greeting, replies=(), end_after=None):
        self.end_after = end_after
        self.pushed = 0
        self.greeting = list(greeting)
        self.replies = list(replies)
        self.written = []
        self.listener = None
        self.close_count = 0

    def set_listener(self, listener):
        self.listener = listener
        self.deliver(self.greeting)

    def deliver(self, chunks):
        for chunk in chunks:
            IOLoop.current().add_callback(self.push, chunk)

    def push(self, data):
        if self.close_count:
            return
        self.listener.on_data(data)
        self.pushed += 1
        if self.pushed == self.end_after:
            self.listener.on_end()

    def write(self, data):
        self.written.append(bytes(data))
        if self.replies:
            self.deliver(self.replies.pop(0))

    def is_readable(self):
        return not self.close_count

    def is_writable(self):
        return not self.close_count

    def close(self):
        self.close_count += 1


class FakeRepository(object):

    def __init__(self, status=('mysql-bin.000003', 154), checksum=False):
        self.status = status
        self.checksum = checksum
        self.calls = []

    def get_master_status(self):
        self.calls.append('get_master_status')
        return self.status

    def is_checksum(self):
        self.calls.append('is_checksum')
        return self.checksum


class BinLogTestCase(AsyncTestCase):

    def make_transport(self, greeting, replies=(), end_after=None):
        transport = FakeTransport(greeting, replies, end_after)
        self.addresses = []

        async def factory(address, port):
            self.addresses.append((address, port))
            return transport

        return transport, factory

    async def wait_until(self, predicate):
        while not predicate():
            await asyncio.sleep(0)
