"""
Builds the handshake response sent after the server greeting.
"""
from functools import partial
import hashlib
import struct

from .constants import CLIENT
from .util import int2byte, pack_int24


SCRAMBLE_LENGTH = 20
MAX_PACKET_SIZE = 2**24 - 1
CHARSET_UTF8_GENERAL_CI = 33
sha1_new = partial(hashlib.new, 'sha1')


# mysql_native_password
# https://dev.mysql.com/doc/internals/en/secure-password-authentication.html#packet-Authentication::Native41


def scramble_native_password(password, message):
    """Scramble used for mysql_native_password"""
    if not password:
        return b''

    stage1 = sha1_new(password).digest()
    stage2 = sha1_new(stage1).digest()
    s = sha1_new()
    s.update(message[:SCRAMBLE_LENGTH])
    s.update(stage2)
    result = s.digest()
    return _my_crypt(result, stage1)


def _my_crypt(message1, message2):
    result = bytearray(message1)

    for i in range(len(result)):
        result[i] ^= message2[i]

    return bytes(result)


def scramble_caching_sha2(password, nonce):
    # (bytes, bytes) -> bytes
    """Scramble algorithm used in cached_sha2_password fast path.

    XOR(SHA256(password), SHA256(SHA256(SHA256(password)), nonce))
    """
    if not password:
        return b''

    p1 = hashlib.sha256(password).digest()
    p2 = hashlib.sha256(p1).digest()
    p3 = hashlib.sha256(p2 + nonce[:SCRAMBLE_LENGTH]).digest()

    res = bytearray(p1)
    for i in range(len(p3)):
        res[i] ^= p3[i]

    return bytes(res)


_scramblers = {
    'mysql_native_password': scramble_native_password,
    'caching_sha2_password': scramble_caching_sha2,
}


class BinLogAuth(object):
    """Default AuthEncoder: a HandshakeResponse41 packet, sequence id 1."""

    def __init__(self, charset_id=CHARSET_UTF8_GENERAL_CI):
        self.charset_id = charset_id

    def encode(self, capability_flags, user, password, salt,
               plugin_name='mysql_native_password'):
        if isinstance(user, str):
            user = user.encode('utf-8')
        if isinstance(password, str):
            password = password.encode('utf-8')
        if plugin_name not in _scramblers:
            plugin_name = 'mysql_native_password'

        authresp = _scramblers[plugin_name](password, salt)

        data = struct.pack('<iIB23s', capability_flags, MAX_PACKET_SIZE,
                           self.charset_id, b'')
        data += user + b'\0'
        data += int2byte(len(authresp)) + authresp
        if capability_flags & CLIENT.PLUGIN_AUTH:
            data += plugin_name.encode('ascii') + b'\0'

        return pack_int24(len(data)) + int2byte(1) + data
