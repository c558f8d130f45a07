from tornado import gen
from tornado.iostream import StreamClosedError
from tornado.locks import Event
from tornado.tcpserver import TCPServer
from tornado.testing import AsyncTestCase, bind_unused_port, gen_test

from tornado_binlog import err
from tornado_binlog.transport import IOStreamTransport


class GreetingServer(TCPServer):
    """Sends a greeting, waits for a 5 byte answer and hangs up."""

    def __init__(self):
        super(GreetingServer, self).__init__()
        self.received = None

    async def handle_stream(self, stream, address):
        try:
            await stream.write(b'hello')
            self.received = await stream.read_bytes(5)
        except StreamClosedError:
            return
        stream.close()


class Listener(object):

    def __init__(self):
        self.data = bytearray()
        self.events = []
        self.done = Event()

    def on_data(self, data):
        self.data += data

    def on_error(self, exc):
        self.events.append(('error', exc))
        self.done.set()

    def on_end(self):
        self.events.append(('end',))
        self.done.set()

    def on_close(self):
        self.events.append(('close',))
        self.done.set()


class TestIOStreamTransport(AsyncTestCase):

    def setUp(self):
        super(TestIOStreamTransport, self).setUp()
        sock, self.port = bind_unused_port()
        self.server = GreetingServer()
        self.server.add_socket(sock)

    def tearDown(self):
        self.server.stop()
        super(TestIOStreamTransport, self).tearDown()

    @gen_test
    async def test_remote_end(self):
        transport = await IOStreamTransport.connect('127.0.0.1', self.port)
        listener = Listener()
        transport.set_listener(listener)
        self.assertTrue(transport.is_writable())

        transport.write(b'world')
        await listener.done.wait()

        self.assertEqual(bytes(listener.data), b'hello')
        self.assertEqual(self.server.received, b'world')
        self.assertEqual(listener.events, [('end',)])
        self.assertFalse(transport.is_readable())

    @gen_test
    async def test_local_close(self):
        transport = await IOStreamTransport.connect('127.0.0.1', self.port)
        listener = Listener()
        transport.set_listener(listener)
        transport.close()
        transport.close()
        await listener.done.wait()

        self.assertEqual(listener.events, [('close',)])
        self.assertFalse(transport.is_writable())
        with self.assertRaises(err.TransportError):
            transport.write(b'late')

    @gen_test
    async def test_listener_failure_is_logged(self):
        class FailingListener(Listener):
            def on_data(self, data):
                raise RuntimeError("listener failed")

        transport = await IOStreamTransport.connect('127.0.0.1', self.port)
        with self.assertLogs('tornado_binlog.transport', level='ERROR') as cm:
            transport.set_listener(FailingListener())
            while not cm.records:
                await gen.sleep(0.01)
        self.assertIn('read loop failed', cm.records[0].getMessage())
        self.assertIsInstance(transport.reader.exception(), RuntimeError)
        transport.close()

    @gen_test
    async def test_listener_set_once(self):
        transport = await IOStreamTransport.connect('127.0.0.1', self.port)
        transport.set_listener(Listener())
        with self.assertRaises(err.InterfaceError):
            transport.set_listener(Listener())
        transport.close()

    @gen_test
    async def test_connect_refused(self):
        sock, port = bind_unused_port()
        sock.close()
        with self.assertRaises(err.ConnectError) as cm:
            await IOStreamTransport.connect('127.0.0.1', port)
        self.assertEqual(cm.exception.errno, err.CR_CONN_HOST_ERROR)
