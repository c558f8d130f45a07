"""Duplex byte stream to the master on top of Tornado's IOStream.

The transport pushes notifications to a single listener object::

    listener.on_data(data)    # bytes arrived
    listener.on_error(exc)    # the stream failed
    listener.on_end()         # the remote side closed the stream
    listener.on_close()       # the stream was closed locally

All data read before the stream failed or ended is delivered before the
matching notification.
"""
import logging

from tornado import gen
from tornado.iostream import StreamClosedError
from tornado.tcpclient import TCPClient
from tornado.util import TimeoutError as ConnectTimeout

from . import err

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class IOStreamTransport(object):

    def __init__(self, stream):
        self.stream = stream
        self._listener = None
        self._closing = False
        self.reader = None

    @classmethod
    async def connect(cls, address, port, tcp_client=None, timeout=None):
        client = tcp_client or TCPClient()
        try:
            stream = await client.connect(address, port, timeout=timeout)
        except (IOError, OSError, ConnectTimeout) as e:
            exc = err.ConnectError(
                err.CR_CONN_HOST_ERROR,
                "Can't connect to MySQL server on %r (%s)" % (address, e))
            exc.original_exception = e
            raise exc
        stream.set_nodelay(True)
        logger.debug("connected to %s:%d", address, port)
        return cls(stream)

    def set_listener(self, listener):
        """Start reading; every notification goes to *listener*."""
        if self._listener is not None:
            raise err.InterfaceError(0, "Transport listener is already set")
        self._listener = listener
        self.reader = gen.convert_yielded(self._read_loop())
        self.reader.add_done_callback(self._read_done)

    async def _read_loop(self):
        stream = self.stream
        while True:
            try:
                data = await stream.read_bytes(READ_CHUNK_SIZE, partial=True)
            except StreamClosedError as e:
                self._notify_closed(e.real_error or stream.error)
                return
            self._listener.on_data(data)

    @staticmethod
    def _read_done(future):
        if not future.cancelled() and future.exception() is not None:
            logger.error("BinLog read loop failed", exc_info=future.exception())

    def _notify_closed(self, error):
        if self._closing:
            self._listener.on_close()
        elif error is not None:
            logger.debug("stream error: %r", error)
            self._listener.on_error(error)
        else:
            self._listener.on_end()

    def write(self, data):
        """Queue *data* for sending.

        Failures are not reported here; they show up as a later error or
        end notification.
        """
        if not self.is_writable():
            raise err.TransportError(err.CR_SERVER_LOST, "BinLog socket is closed")
        future = self.stream.write(data)
        future.add_done_callback(self._write_done)

    @staticmethod
    def _write_done(future):
        if not future.cancelled() and future.exception() is not None:
            logger.debug("write failed: %r", future.exception())

    def is_readable(self):
        return not self.stream.closed()

    def is_writable(self):
        return not self._closing and not self.stream.closed()

    def close(self):
        if self._closing:
            return
        self._closing = True
        self.stream.close()
