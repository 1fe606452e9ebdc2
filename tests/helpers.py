"""Stream doubles for driving the relay loop in memory."""

import errno
import io


class EventLog:
    """Shared record of writes across several streams, in call order."""

    def __init__(self):
        self.events = []

    def writer(self, name):
        return RecordingWriter(name, self)


class RecordingWriter(io.BytesIO):
    """BytesIO that also logs every write as (name, bytes)."""

    def __init__(self, name="out", log=None):
        super().__init__()
        self.name = name
        self.log = log

    def write(self, b):
        if self.log is not None:
            self.log.events.append((self.name, bytes(b)))
        return super().write(b)

    @property
    def chunks(self):
        return [data for name, data in self.log.events if name == self.name]


class FailingReader(io.BytesIO):
    """Yields its content, then reports an I/O error instead of end of input."""

    def readinto1(self, b):
        n = super().readinto1(b)
        if not n:
            raise OSError(errno.EIO, "Input/output error")
        return n


class PlainReader:
    """Readable stream offering only readinto, like a raw file object."""

    def __init__(self, data):
        self._stream = io.BytesIO(data)

    def readinto(self, b):
        return self._stream.readinto(b)


class BrokenWriter(io.BytesIO):
    """Accepts `healthy_writes` writes, then fails every write after that."""

    def __init__(self, healthy_writes=0, exc=None):
        super().__init__()
        self.healthy_writes = healthy_writes
        self.exc = exc or OSError(errno.EBADF, "Bad file descriptor")

    def write(self, b):
        if self.healthy_writes <= 0:
            raise self.exc
        self.healthy_writes -= 1
        return super().write(b)


