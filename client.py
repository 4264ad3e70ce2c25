"""Client for RESP-speaking key-value servers over one persistent TCP connection."""

import logging
import socket
from typing import Optional

from protocol import (
    MAX_NESTING_DEPTH,
    Get,
    Incr,
    Lpush,
    Lrange,
    Ping,
    ProtocolError,
    Reply,
    Request,
    Set,
    decode_response,
    encode_request,
)

logger = logging.getLogger(__name__)


class RespClient:
    """Blocking client. Methods: Ping(), Get(key), Set(key, value), Incr(key), Lpush(key, value), Lrange(key, start, end).

    Exactly one request may be outstanding at a time: replies carry no request
    id, so sharing a client between threads desynchronizes the stream.
    Error replies from the server are returned as ErrorReply values, not raised.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 6379,
        timeout: Optional[float] = None,
        max_depth: int = MAX_NESTING_DEPTH,
    ):
        self._host = host
        self._port = port
        self._max_depth = max_depth
        try:
            self._sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            raise ConnectionError(f"cannot connect to {host}:{port}: {e}") from e
        # two buffered views over the same connection
        self._writer = self._sock.makefile("wb")
        self._reader = self._sock.makefile("rb")
        self._closed = False
        logger.debug("connected to %s:%d", host, port)

    @classmethod
    def connect(cls, address: str, **kwargs) -> "RespClient":
        """Connect to a "host:port" address."""
        host, sep, port = address.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError(f"address must be host:port, got {address!r}")
        return cls(host=host, port=int(port), **kwargs)

    def send(self, request: Request) -> Reply:
        """Send one request and block until its full reply is decoded."""
        if self._closed:
            raise ConnectionError("client is closed")
        line = encode_request(request)
        logger.debug("-> %s", line)
        try:
            self._writer.write(line.encode("utf-8"))
            self._writer.write(b"\r\n")
            self._writer.flush()
            reply = decode_response(self._reader, max_depth=self._max_depth)
        except (OSError, ProtocolError):
            # unread reply lines would be taken as the answer to the next request
            logger.warning("exchange with %s:%d failed, closing connection", self._host, self._port)
            self.close()
            raise
        logger.debug("<- %r", reply)
        return reply

    def Ping(self) -> Reply:
        return self.send(Ping())

    def Get(self, key: str) -> Reply:
        """Get value for key. A missing key yields a BulkString of length -1."""
        return self.send(Get(key))

    def Set(self, key: str, value: str) -> Reply:
        return self.send(Set(key, value))

    def Incr(self, key: str) -> Reply:
        return self.send(Incr(key))

    def Lpush(self, key: str, value: str) -> Reply:
        return self.send(Lpush(key, value))

    def Lrange(self, key: str, start: int, end: int) -> Reply:
        """Elements start..end inclusive; negative indices count from the tail."""
        return self.send(Lrange(key, start, end))

    def close(self) -> None:
        """Release reader, writer and socket together."""
        if self._closed:
            return
        self._closed = True
        try:
            self._writer.close()
        except OSError:
            logger.debug("flush on close failed", exc_info=True)
        finally:
            self._reader.close()
            self._sock.close()
        logger.debug("closed connection to %s:%d", self._host, self._port)

    def __enter__(self) -> "RespClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
