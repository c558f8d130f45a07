# Client side of the MySQL replication protocol
# https://dev.mysql.com/doc/internals/en/replication-protocol.html
# Error codes:
# https://dev.mysql.com/doc/refman/5.5/en/error-messages-client.html
import enum
import logging

from tornado.concurrent import Future
from tornado.ioloop import IOLoop
from tornado.locks import Event
from tornado.netutil import Resolver, is_valid_ip

from . import commands
from . import err
from ._auth import BinLogAuth
from .buffer import ByteBuffer
from .constants import CLIENT
from .gtid import GtidEncoder
from .packet import (
    INCOMPLETE, describe_event, dump_packet, interpret, read_event_header,
    try_extract_packet)
from .protocol import parse_handshake
from .repository import MySQLRepository
from .transport import IOStreamTransport

DEBUG = False

logger = logging.getLogger(__name__)


class State(enum.Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    AWAITING_HANDSHAKE = 'awaiting handshake'
    AUTHENTICATING = 'authenticating'
    NEGOTIATING_CHECKSUM = 'negotiating checksum'
    REGISTERING_SLAVE = 'registering slave'
    REQUESTING_DUMP = 'requesting dump'
    STREAMING = 'streaming'
    ERRORED = 'errored'
    CLOSED = 'closed'


TERMINAL_STATES = (State.ERRORED, State.CLOSED)


class BinLogConnection(object):
    """
    Replication session with a MySQL or MariaDB master.

    The proper way to get a streaming instance of this class is to call
    :func:`tornado_binlog.connect`.

    config: :class:`~tornado_binlog.config.ReplicationConfig`
    on_event: Called with the raw bytes of every binlog packet, OK byte
        included, in the order the master sent them.
    on_error: Called once with the exception that ended the stream.
    auth: AuthEncoder, ``encode(capability_flags, user, password, salt,
        plugin_name) -> bytes``. (default: BinLogAuth)
    gtid_encoder: ``encode(gtid_set) -> (length, bytes)``. (default: GtidEncoder)
    repository: ``get_master_status() -> (file, position)`` and
        ``is_checksum() -> bool``. (default: MySQLRepository)
    transport_factory: Coroutine ``(address, port) -> transport``.
        (default: IOStreamTransport.connect)
    resolver: tornado Resolver for host names.
    client_flag: Capability flags sent to the server.
    """

    def __init__(self, config, on_event, on_error=None, auth=None,
                 gtid_encoder=None, repository=None, transport_factory=None,
                 resolver=None, client_flag=CLIENT.CAPABILITIES):
        config.validate()
        self.config = config
        self._on_event = on_event
        self._on_error = on_error
        self._auth = auth or BinLogAuth()
        self._gtid_encoder = gtid_encoder or GtidEncoder()
        self._repository = repository or MySQLRepository(config)
        self._transport_factory = transport_factory or IOStreamTransport.connect
        self._resolver = resolver
        self.client_flag = client_flag

        self.state = State.DISCONNECTED
        self.check_sum = False
        self.server_info = None
        self.host_info = "Not connected"
        self._transport = None
        self._buffer = ByteBuffer()
        self._waiter = None
        self._error = None
        self._closed = Event()

    @property
    def open(self):
        return self.state not in TERMINAL_STATES and self._transport is not None

    def get_server_info(self):
        return self.server_info.server_version if self.server_info else None

    def _advance(self, state):
        # a transport notification may have ended the session while suspended
        self._check_open()
        self._set_state(state)

    def _set_state(self, state):
        logger.debug("%s -> %s", self.state.value, state.value)
        self.state = state

    async def connect(self):
        """Run the negotiation up to the point where events stream in.

        Raises the first error met; the connection is unusable afterwards.
        """
        if self.state is not State.DISCONNECTED:
            raise err.InterfaceError(0, "connect() called in state %r" % self.state.value)
        try:
            self._set_state(State.CONNECTING)
            address = await self._resolve(self.config.host)
            transport = await self._transport_factory(address, self.config.port)
            if self.state is not State.CONNECTING:
                # closed while the transport was being opened
                transport.close()
                self._check_open()
            self._transport = transport
            self.host_info = "socket %s:%d" % (address, self.config.port)
            transport.set_listener(self)

            self._advance(State.AWAITING_HANDSHAKE)
            packet = await self._read_packet(check_status=False)
            self.server_info = parse_handshake(packet.get_all_data())
            logger.info("Connected to MySQL %s on %s",
                        self.server_info.server_version, self.host_info)

            self._advance(State.AUTHENTICATING)
            await self._request_authentication()

            self._advance(State.NEGOTIATING_CHECKSUM)
            await self._negotiate_checksum()

            self._advance(State.REGISTERING_SLAVE)
            await self._register_slave()

            self._advance(State.REQUESTING_DUMP)
            await self._request_dump()

            self._advance(State.STREAMING)
        except Exception as e:
            self._fail(e)
            raise

        # events may have arrived together with the dump request's OK
        self._drain()

    async def _resolve(self, host):
        if is_valid_ip(host):
            return host
        resolver = self._resolver or Resolver()
        try:
            addrinfo = await resolver.resolve(host, self.config.port)
        except (IOError, OSError) as e:
            raise err.ResolutionError(
                err.CR_UNKNOWN_HOST, "Unable to resolve hostname: %s (%s)" % (host, e))
        address = addrinfo[0][1][0] if addrinfo else host
        if address == host:
            raise err.ResolutionError(
                err.CR_UNKNOWN_HOST, "Unable to resolve hostname: %s" % host)
        return address

    async def _request_authentication(self):
        info = self.server_info
        data = self._auth.encode(
            self.client_flag, self.config.user, self.config.password, info.salt,
            info.auth_plugin_name or 'mysql_native_password')
        self._write(data)
        try:
            packet = await self._read_packet(check_status=False)
            if packet.is_extra_auth_data():
                packet = await self._caching_sha2_fast_auth(packet)
            interpret(packet)
        except err.ProtocolStatusError as e:
            raise err.AuthenticationError(e.errno, e.errmsg)

    async def _caching_sha2_fast_auth(self, packet):
        # magic numbers:
        # 3 - fast auth succeeded, an OK packet follows
        # 4 - need full auth, which needs TLS or the server's RSA key
        result = packet.get_all_data()[1:2]
        if result == b'\x03':
            logger.debug("caching sha2: succeeded by fast path")
            return await self._read_packet(check_status=False)
        if result == b'\x04':
            raise err.AuthenticationError(
                err.CR_AUTH_PLUGIN_ERR,
                "caching_sha2_password full authentication is not supported; "
                "use mysql_native_password for the replication user")
        raise err.AuthenticationError(
            err.CR_AUTH_PLUGIN_ERR,
            "caching sha2: Unknown result for fast auth: %r" % (result,))

    async def _negotiate_checksum(self):
        check_sum = self.config.check_sum
        if check_sum is None:
            check_sum = await self._lookup(self._repository.is_checksum)
        self.check_sum = bool(check_sum)
        # The master needs to know we can handle checksummed events
        if self.check_sum:
            await self._execute("SET @master_binlog_checksum=@@global.binlog_checksum")

    async def _register_slave(self):
        if self.config.slave_uuid:
            await self._execute("SET @slave_uuid = '%s'" % self.config.slave_uuid)
        if self.config.heartbeat_period:
            await self._execute("SET @master_heartbeat_period = %d"
                                % self.config.heartbeat_nanoseconds())
        await self._send(commands.register_slave(self.config.slave_id))

    async def _request_dump(self):
        config = self.config
        if config.gtid:
            encoded_length, encoded = self._gtid_encoder.encode(config.gtid)
            logger.info("Dump binlog after GTID set %s", config.gtid)
            await self._send(commands.binlog_dump_gtid(
                config.slave_id, encoded_length, encoded))
            return

        if config.mariadb_gtid:
            await self._execute("SET @mariadb_slave_capability = 4")
            await self._execute("SET @slave_connect_state = '%s'" % config.mariadb_gtid)
            await self._execute("SET @slave_gtid_strict_mode = 0")
            await self._execute("SET @slave_gtid_ignore_duplicates = 0")

        if config.has_position:
            log_file, log_pos = config.log_file, config.log_pos
        else:
            log_file, log_pos = await self._lookup(self._repository.get_master_status)
        logger.info("Dump binlog from %s at %d", log_file, log_pos)
        await self._send(commands.binlog_dump(config.slave_id, log_file, log_pos))

    async def _lookup(self, method):
        result = await IOLoop.current().run_in_executor(None, method)
        self._check_open()
        return result

    async def _execute(self, sql):
        return await self._send(commands.query(sql))

    async def _send(self, command):
        self._write(bytes(command))
        return await self._read_packet()

    def _check_open(self):
        if self.state is State.ERRORED:
            raise self._error
        if self.state is State.CLOSED or self._transport is None:
            raise err.InterfaceError(0, "Connection is closed")

    def _write(self, data):
        self._check_open()
        if DEBUG:
            dump_packet(data)
        self._transport.write(data)

    def _read_packet(self, check_status=True):
        """Return a Future resolved with the next packet.

        Only one read may be outstanding at a time.
        """
        self._check_open()
        if self._waiter is not None:
            raise err.InterfaceError(0, "Another packet read is already pending")
        future = Future()
        packet = try_extract_packet(self._buffer)
        if packet is INCOMPLETE:
            self._waiter = (future, check_status)
        else:
            self._resolve_waiter(future, packet, check_status)
        return future

    @staticmethod
    def _resolve_waiter(future, packet, check_status):
        try:
            future.set_result(interpret(packet, check_status))
        except err.ProtocolStatusError as e:
            future.set_exception(e)

    def _drain(self):
        while self.state is State.STREAMING:
            packet = try_extract_packet(self._buffer)
            if packet is INCOMPLETE:
                return
            try:
                interpret(packet)
            except err.ProtocolStatusError as e:
                self._fail(e)
                return
            data = packet.get_all_data()
            if logger.isEnabledFor(logging.DEBUG):
                header = read_event_header(data)
                if header is not None:
                    logger.debug("Received %s", describe_event(header))
            try:
                self._on_event(data)
            except Exception:
                # the packet stays consumed; the rest waits for more data
                logger.exception("Event handler failed on %r", packet)
                return

    # Transport notifications

    def on_data(self, data):
        if self.state in TERMINAL_STATES:
            return
        if not data:
            self._fail(err.DisconnectedError(err.CR_SERVER_LOST, "Disconnected by remote side"))
            return
        self._buffer.append(data)
        if self.state is State.STREAMING:
            self._drain()
        elif self._waiter is not None:
            packet = try_extract_packet(self._buffer)
            if packet is not INCOMPLETE:
                future, check_status = self._waiter
                self._waiter = None
                self._resolve_waiter(future, packet, check_status)

    def on_error(self, exc):
        self._fail(err.TransportError(err.CR_SERVER_LOST, "BinLog socket error (%s)" % (exc,)))

    def on_end(self):
        self._fail(err.TransportError(err.CR_SERVER_LOST, "BinLog socket end"))

    def on_close(self):
        self._fail(err.TransportError(err.CR_SERVER_LOST, "BinLog socket close"))

    def _fail(self, exc):
        if self.state in TERMINAL_STATES:
            return
        streaming = self.state is State.STREAMING
        logger.error("Replication failed while %s: %s", self.state.value, exc)
        self._error = exc
        self._set_state(State.ERRORED)
        self._release()
        if self._waiter is not None:
            future, _ = self._waiter
            self._waiter = None
            future.set_exception(exc)
        self._closed.set()
        if streaming and self._on_error is not None:
            try:
                self._on_error(exc)
            except Exception:
                logger.exception("Error handler failed on %r", exc)

    def _release(self):
        transport, self._transport = self._transport, None
        self._buffer.clear()
        if transport is not None:
            transport.close()

    def close(self):
        """Close the stream. Safe to call in any state, more than once."""
        if self.state is State.CLOSED:
            return
        self._set_state(State.CLOSED)
        self._release()
        if self._waiter is not None:
            future, _ = self._waiter
            self._waiter = None
            future.set_exception(err.InterfaceError(0, "Connection closed"))
        self._closed.set()

    async def wait_closed(self):
        """Wait until the stream ends.

        Returns normally after :meth:`close`, raises the error that ended the
        stream otherwise.
        """
        await self._closed.wait()
        if self._error is not None:
            raise self._error
