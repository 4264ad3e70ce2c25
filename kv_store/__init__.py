from .store import KVStore, NotAnIntegerError, WrongTypeError

__all__ = ["KVStore", "NotAnIntegerError", "WrongTypeError"]
