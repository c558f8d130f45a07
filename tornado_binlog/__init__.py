'''
Tornado-Binlog: A pure-Python MySQL replication client for Tornado.

Copyright (c) 2010, 2013-2016 PyMySQL contributors

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in
all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
THE SOFTWARE.

'''

VERSION = (0, 1, 0, None)

from .constants import EVENT_TYPE
from .err import Warning, Error, InterfaceError, DatabaseError, \
     OperationalError, ProgrammingError, MySQLError, ConfigError, \
     FramingError, InsufficientData, ResolutionError, ConnectError, \
     TransportError, DisconnectedError, ProtocolStatusError, \
     AuthenticationError, BinLogNotEnabled
from .config import ReplicationConfig
from .connections import BinLogConnection, State
from .packet import read_event_header


async def connect(config=None, on_event=None, **kwargs):
    """Open a replication stream and return it once events are flowing.

    Keyword arguments accepted by :class:`ReplicationConfig` build the
    config when none is given; the rest go to :class:`BinLogConnection`.
    """
    if on_event is None:
        raise ProgrammingError("on_event is required")
    if config is None:
        config_kwargs = {}
        for name in list(kwargs):
            if name in _CONFIG_ARGS:
                config_kwargs[name] = kwargs.pop(name)
        config = ReplicationConfig(**config_kwargs)
    conn = BinLogConnection(config, on_event, **kwargs)
    await conn.connect()
    return conn


_CONFIG_ARGS = frozenset(
    ReplicationConfig.__init__.__code__.co_varnames[
        1:ReplicationConfig.__init__.__code__.co_argcount])


def get_client_info():
    return '.'.join(map(str, VERSION[:3]))


__version__ = get_client_info()

__all__ = [
    'AuthenticationError', 'BinLogConnection', 'BinLogNotEnabled',
    'ConfigError', 'ConnectError', 'DatabaseError', 'DisconnectedError',
    'EVENT_TYPE', 'Error', 'FramingError', 'InsufficientData',
    'InterfaceError', 'MySQLError', 'OperationalError', 'ProgrammingError',
    'ProtocolStatusError', 'ReplicationConfig', 'ResolutionError', 'State',
    'TransportError', 'Warning', 'connect', 'get_client_info',
    'read_event_header', '__version__',
    ]
