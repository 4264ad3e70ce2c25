"""Tests for the in-memory store and the server's command handling."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from kv_store import KVStore, NotAnIntegerError, WrongTypeError
from protocol import Array, BulkString, ErrorReply, Integer, SimpleString
from server import execute


@pytest.fixture
def store():
    return KVStore()


class TestStrings:
    """Get, Set and Incr."""

    def test_get_missing(self, store):
        assert store.get("nope") is None

    def test_set_then_get(self, store):
        store.set("foo", "bar")
        assert store.get("foo") == "bar"

    def test_set_twice_same_key(self, store):
        store.set("k", "v1")
        store.set("k", "v2")
        assert store.get("k") == "v2"

    def test_incr(self, store):
        assert store.incr("n") == 1
        assert store.incr("n") == 2
        store.set("m", "-5")
        assert store.incr("m") == -4
        assert store.get("m") == "-4"

    def test_incr_non_numeric(self, store):
        store.set("k", "hello")
        with pytest.raises(NotAnIntegerError):
            store.incr("k")
        store.set("k", " 5")
        with pytest.raises(NotAnIntegerError):
            store.incr("k")

    def test_incr_overflow(self, store):
        store.set("k", str(2**63 - 1))
        with pytest.raises(NotAnIntegerError):
            store.incr("k")


class TestLists:
    """Lpush and Lrange."""

    def test_lpush_prepends(self, store):
        assert store.lpush("l", "a") == 1
        assert store.lpush("l", "b", "c") == 3
        assert store.lrange("l", 0, -1) == ["c", "b", "a"]

    def test_lrange_indices(self, store):
        store.lpush("l", "e", "d", "c", "b", "a")
        assert store.lrange("l", 1, 2) == ["b", "c"]
        assert store.lrange("l", -2, -1) == ["d", "e"]
        assert store.lrange("l", -100, 100) == ["a", "b", "c", "d", "e"]
        assert store.lrange("l", 3, 1) == []
        assert store.lrange("l", 10, 20) == []
        assert store.lrange("missing", 0, -1) == []

    def test_wrong_type(self, store):
        store.lpush("l", "x")
        with pytest.raises(WrongTypeError):
            store.get("l")
        with pytest.raises(WrongTypeError):
            store.incr("l")
        store.set("s", "x")
        with pytest.raises(WrongTypeError):
            store.lpush("s", "y")


class TestExecute:
    """Inline command lines are tokenised and answered with replies."""

    def test_ping(self, store):
        assert execute(store, "PING") == SimpleString("PONG")
        assert execute(store, 'ping "hi"') == BulkString(2, "hi")

    def test_quoted_arguments(self, store):
        assert execute(store, 'SET "a key" "say \\"hi\\""') == SimpleString("OK")
        assert execute(store, 'GET "a key"') == BulkString(8, 'say "hi"')

    def test_get_missing_is_null_bulk(self, store):
        assert execute(store, 'GET "nope"') == BulkString(-1, "")

    def test_incr_error_reply(self, store):
        execute(store, 'SET "k" "text"')
        reply = execute(store, 'INCR "k"')
        assert isinstance(reply, ErrorReply)
        assert reply.value.startswith("ERR value is not an integer")

    def test_lrange_bare_and_quoted_indices(self, store):
        execute(store, 'LPUSH "l" "b"')
        execute(store, 'LPUSH "l" "a"')
        expected = Array(2, [BulkString(1, "a"), BulkString(1, "b")])
        assert execute(store, 'LRANGE "l" 0 -1') == expected
        assert execute(store, 'LRANGE "l" "0" "-1"') == expected

    def test_lrange_bad_index(self, store):
        assert isinstance(execute(store, 'LRANGE "l" zero -1'), ErrorReply)

    def test_wrong_type_reply(self, store):
        execute(store, 'LPUSH "l" "a"')
        assert execute(store, 'GET "l"').value.startswith("WRONGTYPE")

    def test_unknown_command(self, store):
        assert execute(store, 'FLUSHALL') == ErrorReply("ERR unknown command 'FLUSHALL'")

    def test_wrong_arity(self, store):
        assert execute(store, 'GET') == ErrorReply("ERR wrong number of arguments for 'get' command")
        assert execute(store, 'SET "a"') == ErrorReply("ERR wrong number of arguments for 'set' command")

    def test_unbalanced_quotes(self, store):
        assert execute(store, 'GET "oops') == ErrorReply("ERR Protocol error: unbalanced quotes in request")

    def test_lpush_returns_length(self, store):
        assert execute(store, 'LPUSH "l" "a"') == Integer(1)
        assert execute(store, 'LPUSH "l" "b" "c"') == Integer(3)
