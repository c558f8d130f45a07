import struct


def int2byte(i):
    return struct.pack("!B", i)


def pack_int24(n):
    return struct.pack('<I', n)[:3]


def hex_to_bytes(text):
    """'a721031c-d2c1-...' style identifiers to raw bytes."""
    return bytes.fromhex(text.replace('-', ''))
