import struct


class MySQLError(Exception):

    """Exception related to operation with MySQL."""
    def __init__(self, *args):
        if len(args) == 2:
            self.errno = args[0]
            self.errmsg = args[1]
        else:
            self.errno = -1
            self.errmsg = args[0] if args else ''
        super(MySQLError, self).__init__(*args)


class Warning(MySQLError):

    """Exception raised for important warnings."""


class Error(MySQLError):

    """Exception that is the base class of all other error exceptions
    (not Warning)."""


class InterfaceError(Error):

    """Exception raised for errors that are related to the replication
    client itself rather than the server, e.g. using a connection that
    was already closed."""


class DatabaseError(Error):

    """Exception raised for errors that are related to the database."""


class OperationalError(DatabaseError):

    """Exception raised for errors that are related to the database's
    operation and not necessarily under the control of the programmer,
    e.g. an unexpected disconnect occurs or the host name is not found."""


class ProgrammingError(DatabaseError):

    """Exception raised for programming errors, e.g. an invalid
    replication setting."""


class ConfigError(ProgrammingError):

    """Invalid value in the replication configuration."""


class FramingError(InterfaceError):

    """Misuse of the receive buffer.

    Incomplete frames are not errors: the packet framer reports them with
    :data:`tornado_binlog.packet.INCOMPLETE` and never raises this.
    """


class InsufficientData(FramingError):

    """Fewer bytes are buffered than were requested."""


class ResolutionError(OperationalError):

    """Host name of the master could not be resolved."""


class ConnectError(OperationalError):

    """TCP connection to the master could not be established."""


class TransportError(OperationalError):

    """The established connection reported an error, or was ended or closed
    by the remote side."""


class DisconnectedError(TransportError):

    """The transport delivered zero bytes where data was expected."""


class ProtocolStatusError(OperationalError):

    """The server answered a command with an ERR packet."""


class AuthenticationError(ProtocolStatusError):

    """The server rejected the authentication payload."""


class BinLogNotEnabled(OperationalError):

    """The master did not report a binlog file/position."""


CR_CONN_HOST_ERROR = 2003
CR_UNKNOWN_HOST = 2005
CR_SERVER_LOST = 2013
CR_AUTH_PLUGIN_ERR = 2061

ERR_MESSAGE_OFFSET = 9


def _get_error_info(data):
    # an ERR packet too short to hold the code reports errno 0
    if len(data) < 3:
        errno = 0
    else:
        errno = struct.unpack_from('<H', bytes(data), 1)[0]
    errorvalue = bytes(data[ERR_MESSAGE_OFFSET:]).decode('utf-8', 'replace')
    return errno, errorvalue


def raise_mysql_exception(data, errorclass=ProtocolStatusError):
    errno, errorvalue = _get_error_info(data)
    raise errorclass(errno, errorvalue)
