from .err import InsufficientData


class ByteBuffer(object):
    """Append-only accumulator for bytes received from the transport.

    Bytes leave the buffer strictly in arrival order, only through
    :meth:`take_front`.
    """
    __slots__ = ('_data',)

    def __init__(self, data=b''):
        self._data = bytearray(data)

    def __len__(self):
        return len(self._data)

    def __bool__(self):
        return bool(self._data)

    def append(self, data):
        self._data += data

    def peek(self, size):
        """Return the first 'size' bytes without consuming them."""
        if size > len(self._data):
            raise InsufficientData(
                'Requested %d bytes but only %d are buffered' % (size, len(self._data)))
        return bytes(self._data[:size])

    def take_front(self, size):
        """Return the first 'size' bytes and remove them from the buffer."""
        result = self.peek(size)
        del self._data[:size]
        return result

    def clear(self):
        del self._data[:]
