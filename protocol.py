"""Line-based RESP protocol: inline command encoding and recursive reply decoding."""

import re
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Union

MAX_NESTING_DEPTH = 512

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class ProtocolError(ValueError):
    """Reply could not be decoded (bad integer field, bad bytes, nesting too deep)."""


# Requests


@dataclass(frozen=True)
class Ping:
    pass


@dataclass(frozen=True)
class Get:
    key: str


@dataclass(frozen=True)
class Set:
    key: str
    value: str


@dataclass(frozen=True)
class Incr:
    key: str


@dataclass(frozen=True)
class Lpush:
    key: str
    value: str


@dataclass(frozen=True)
class Lrange:
    key: str
    start: int
    end: int


Request = Union[Ping, Get, Set, Incr, Lpush, Lrange]


# Replies


@dataclass
class SimpleString:
    value: str


@dataclass
class ErrorReply:
    """Server-side error reply (`-ERR ...`). A decoded value, never raised."""

    value: str


@dataclass
class Integer:
    value: int


@dataclass
class BulkString:
    length: int
    value: str


@dataclass
class Array:
    length: int
    value: list = field(default_factory=list)


@dataclass
class Unknown:
    """Unrecognised type tag; both fields are None at end of stream."""

    type_tag: Optional[str] = None
    raw: Optional[str] = None


Reply = Union[SimpleString, ErrorReply, Integer, BulkString, Array, Unknown]


def _quote(text: str) -> str:
    # Only '"' is escaped; CR/LF inside text will break the line framing.
    return '"' + text.replace('"', '\\"') + '"'


def encode_request(request: Request) -> str:
    """Encode a request as one inline command line, without the trailing CRLF.

    String arguments are double-quoted, integer arguments are written bare:
    LRANGE "mylist" 0 -1
    """
    if isinstance(request, Ping):
        return "PING"
    if isinstance(request, Get):
        return f"GET {_quote(request.key)}"
    if isinstance(request, Set):
        return f"SET {_quote(request.key)} {_quote(request.value)}"
    if isinstance(request, Incr):
        return f"INCR {_quote(request.key)}"
    if isinstance(request, Lpush):
        return f"LPUSH {_quote(request.key)} {_quote(request.value)}"
    if isinstance(request, Lrange):
        return f"LRANGE {_quote(request.key)} {int(request.start)} {int(request.end)}"
    raise TypeError(f"not a request: {request!r}")


def _parse_integer(payload: str) -> int:
    if not _INTEGER_RE.fullmatch(payload):
        raise ProtocolError(f"reply parse failure: expected integer, got {payload!r}")
    value = int(payload)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ProtocolError(f"reply parse failure: integer out of range: {payload}")
    return value


def _read_line(reader: BinaryIO) -> Optional[str]:
    """Read one LF-terminated line. Returns None at end of stream."""
    data = reader.readline()
    if not data:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ProtocolError(f"reply parse failure: invalid utf-8: {data!r}") from e


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def decode_response(reader: BinaryIO, max_depth: int = MAX_NESTING_DEPTH) -> Reply:
    """Decode one reply from a binary line-readable stream.

    `reader` only needs readline(). Arrays recurse once per declared element,
    reading one line at a time; bulk strings read exactly one content line
    whatever their declared length. End of stream yields Unknown(None, None)
    at the top level and raises ProtocolError inside an array.
    """
    return _decode(reader, 0, max_depth)


def _decode(reader: BinaryIO, depth: int, max_depth: int) -> Reply:
    line = _read_line(reader)
    if line is None:
        return Unknown(None, None)

    tag, payload = line[0], _strip_eol(line[1:])
    if tag == "+":
        return SimpleString(payload)
    if tag == "-":
        return ErrorReply(payload)
    if tag == ":":
        return Integer(_parse_integer(payload))
    if tag == "$":
        length = _parse_integer(payload)
        content = _read_line(reader)
        return BulkString(length, _strip_eol(content) if content is not None else "")
    if tag == "*":
        length = _parse_integer(payload)
        if depth >= max_depth:
            raise ProtocolError(f"reply parse failure: arrays nested deeper than {max_depth}")
        items = []
        for i in range(length):
            item = _decode(reader, depth + 1, max_depth)
            if isinstance(item, Unknown) and item.type_tag is None:
                raise ProtocolError(f"reply parse failure: stream ended after {i} of {length} array elements")
            items.append(item)
        return Array(length, items)
    return Unknown(tag, payload)


def encode_reply(reply: Reply) -> bytes:
    """Encode a reply with the framing decode_response expects."""
    if isinstance(reply, SimpleString):
        text = f"+{reply.value}\r\n"
    elif isinstance(reply, ErrorReply):
        text = f"-{reply.value}\r\n"
    elif isinstance(reply, Integer):
        text = f":{reply.value}\r\n"
    elif isinstance(reply, BulkString):
        # Content line is always present, including for null (-1) bulk strings.
        text = f"${reply.length}\r\n{reply.value}\r\n"
    elif isinstance(reply, Array):
        return f"*{reply.length}\r\n".encode("utf-8") + b"".join(encode_reply(r) for r in reply.value)
    else:
        raise TypeError(f"cannot encode reply: {reply!r}")
    return text.encode("utf-8")
