"""TCP server answering inline commands with RESP replies, used for tests and benchmarks."""

import logging
import shlex
import socket
import threading

from kv_store import KVStore, NotAnIntegerError, WrongTypeError
from protocol import Array, BulkString, ErrorReply, Integer, Reply, SimpleString, encode_reply

logger = logging.getLogger(__name__)

# verb -> (min args, max args); None means unbounded
_ARITY = {
    "ping": (0, 1),
    "get": (1, 1),
    "set": (2, 2),
    "incr": (1, 1),
    "lpush": (2, None),
    "lrange": (3, 3),
}


def _bulk(value: str) -> BulkString:
    return BulkString(len(value.encode("utf-8")), value)


def _parse_index(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise NotAnIntegerError("ERR value is not an integer or out of range") from None


def execute(store: KVStore, line: str) -> Reply:
    """Run one inline command line against the store."""
    try:
        args = shlex.split(line)
    except ValueError:
        return ErrorReply("ERR Protocol error: unbalanced quotes in request")
    if not args:
        return ErrorReply("ERR empty command")

    name, args = args[0], args[1:]
    verb = name.lower()
    if verb not in _ARITY:
        return ErrorReply(f"ERR unknown command '{name}'")
    lo, hi = _ARITY[verb]
    if len(args) < lo or (hi is not None and len(args) > hi):
        return ErrorReply(f"ERR wrong number of arguments for '{verb}' command")

    try:
        if verb == "ping":
            return _bulk(args[0]) if args else SimpleString("PONG")
        if verb == "get":
            value = store.get(args[0])
            if value is None:
                return BulkString(-1, "")
            return _bulk(value)
        if verb == "set":
            store.set(args[0], args[1])
            return SimpleString("OK")
        if verb == "incr":
            return Integer(store.incr(args[0]))
        if verb == "lpush":
            return Integer(store.lpush(args[0], *args[1:]))
        if verb == "lrange":
            start, stop = _parse_index(args[1]), _parse_index(args[2])
            items = [_bulk(v) for v in store.lrange(args[0], start, stop)]
            return Array(len(items), items)
    except (WrongTypeError, NotAnIntegerError) as e:
        return ErrorReply(str(e))
    raise AssertionError(f"unhandled verb {verb}")


def handle_client(conn: socket.socket, store: KVStore) -> None:
    """Handle one client connection with CRLF-terminated inline commands."""
    buffer = b""
    try:
        while True:
            data = conn.recv(4096)
            if not data:
                break
            buffer += data
            while b"\n" in buffer:
                line, buffer = buffer.split(b"\n", 1)
                line = line.rstrip(b"\r")
                if not line:
                    continue
                try:
                    text = line.decode("utf-8")
                except UnicodeDecodeError:
                    logger.warning("rejecting non utf-8 request line")
                    conn.sendall(encode_reply(ErrorReply("ERR Protocol error: invalid utf-8")))
                    continue
                reply = execute(store, text)
                if isinstance(reply, ErrorReply):
                    logger.debug("error reply for %r: %s", text, reply.value)
                conn.sendall(encode_reply(reply))
    except (ConnectionResetError, BrokenPipeError):
        logger.debug("client disconnected abruptly")
    finally:
        conn.close()


def run_server(host: str = "127.0.0.1", port: int = 6379) -> None:
    """Run the server until interrupted."""
    store = KVStore()
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind((host, port))
    server.listen(64)
    logger.info("listening on %s:%d", host, port)
    try:
        while True:
            conn, addr = server.accept()
            logger.debug("accepted connection from %s:%d", *addr[:2])
            t = threading.Thread(target=handle_client, args=(conn, store))
            t.daemon = True
            t.start()
    finally:
        server.close()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=6379)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    run_server(host=args.host, port=args.port)
