# Initial handshake of the MySQL client-server protocol
# https://dev.mysql.com/doc/internals/en/connection-phase-packets.html#packet-Protocol::Handshake

import collections as _collections
import struct as _struct

from .constants import CLIENT


def _parse_proto_desc(desc, clsName):
    struct_types, fields = zip(*desc)
    expr = "<" + "".join(struct_types)
    non_empty_fields = (field for field in fields if field is not None)
    proto_fields = " ".join(non_empty_fields)

    newType = _collections.namedtuple(clsName, proto_fields)

    return expr, newType


def _expand_expression(expr, buffer):
    while True:
        pos = expr.find('z')
        if pos < 0:
            break
        asciiz_start = _struct.calcsize(expr[:pos])
        asciiz_len = buffer[asciiz_start:].find(b'\0')
        if asciiz_len < 0:
            raise ValueError("Invalid read on non-null terminated string")
        expr = '%s%dsx%s' % (expr[:pos], asciiz_len, expr[pos+1:])
    return expr


def _parse(definition, ret_type, data, offset=0):
    parsed_fields = _struct.unpack_from(definition, data, offset)
    return (ret_type)(*parsed_fields)


_basics_proto = (
    ("B",  "protocol_version"),
    ("z",  "server_version"),
    ("I",  "connection_id"),
    ("8s", "auth_plugin_data_part1"),
    ("x",  None),
    ("H",  "capabilities_lower"),
)

_basics_expr, Basics = _parse_proto_desc(_basics_proto, "Basics")

_additional_proto = (
    ("B",   'character_set'),
    ("H",   'status_flags'),
    ("H",   'capabilities_upper'),
    ("B",   'auth_plugin_data_length'),
    ("10x", None),
)

_additional_expr, Additional = _parse_proto_desc(_additional_proto, "Additional")

ServerInfo = _collections.namedtuple(
    'ServerInfo',
    'protocol_version server_version connection_id capabilities '
    'character_set status_flags salt auth_plugin_name')


def parse_basics(data):
    expanded_basics_expr = _expand_expression(_basics_expr, data)
    size = _struct.calcsize(expanded_basics_expr)
    parsed = _parse(expanded_basics_expr, Basics, data)
    return size, parsed


def parse_additional(data, offset):
    size = _struct.calcsize(_additional_expr)
    parsed = _parse(_additional_expr, Additional, data, offset)
    return size, parsed


def parse_handshake(data):
    """Parse the server greeting into a :class:`ServerInfo`."""
    data = bytes(data)
    i, basics = parse_basics(data)
    capabilities = basics.capabilities_lower
    salt = basics.auth_plugin_data_part1
    character_set = status_flags = None
    auth_plugin_name = ''

    if len(data) >= i + _struct.calcsize(_additional_expr):
        size, additional = parse_additional(data, i)
        i += size
        character_set = additional.character_set
        status_flags = additional.status_flags
        capabilities |= additional.capabilities_upper << 16

        if capabilities & CLIENT.SECURE_CONNECTION:
            # part 2 is at least 13 bytes and ends with a NUL
            salt_len = max(13, additional.auth_plugin_data_length - 8)
            salt += data[i:i+salt_len-1]
            i += salt_len

        if capabilities & CLIENT.PLUGIN_AUTH:
            end = data.find(b'\0', i)
            if end < 0:
                end = len(data)
            auth_plugin_name = data[i:end].decode('ascii')

    return ServerInfo(
        protocol_version=basics.protocol_version,
        server_version=basics.server_version.decode('latin1'),
        connection_id=basics.connection_id,
        capabilities=capabilities,
        character_set=character_set,
        status_flags=status_flags,
        salt=salt,
        auth_plugin_name=auth_plugin_name)
